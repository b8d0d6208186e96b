import re
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping

from .errors import InvalidPatternError
from .rwlock import ReadWriteLock

# Set up a logger for this module
logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Pattern:
    """
    A single compiled secret detection rule.

    Instances are immutable; re-registering a name swaps in a new Pattern
    rather than mutating the old one, so a scan holding a snapshot never
    sees a half-updated rule.

    Attributes:
        name (str): The registry key and the `kind` reported on findings
                    (e.g. "aws_access_key").
        regex (re.Pattern): The compiled regular expression for detection.
    """
    name: str
    regex: re.Pattern

    @property
    def source(self) -> str:
        return self.regex.pattern


def compile_pattern(name: str, source: str) -> Pattern:
    """
    Compiles a regex source into a Pattern.

    Raises:
        InvalidPatternError: If `source` is not a valid regular expression.
    """
    try:
        compiled_regex = re.compile(source)
    except re.error as e:
        raise InvalidPatternError(name, source, e) from e
    return Pattern(name=name, regex=compiled_regex)


class PatternRegistry:
    """
    The set of patterns a scanner matches with, keyed by name.

    Scans read the registry concurrently from worker threads; registration
    takes the write side of a readers/writer lock and excludes them all.
    """

    def __init__(self):
        self._patterns: Dict[str, Pattern] = {}
        self._lock = ReadWriteLock()

    def add(self, name: str, source: str) -> Pattern:
        """
        Compiles and installs a pattern, replacing any prior one with that name.

        Compilation happens before the write lock is taken, so a bad pattern
        never touches the registry.

        Raises:
            InvalidPatternError: If `source` does not compile.
        """
        try:
            pattern = compile_pattern(name, source)
        except InvalidPatternError as e:
            logger.warning(f"Rejected pattern '{name}': {e.cause}")
            raise

        with self._lock.write_locked():
            replaced = name in self._patterns
            self._patterns[name] = pattern

        logger.debug(f"{'Replaced' if replaced else 'Registered'} pattern '{name}'")
        return pattern

    def add_many(self, patterns: Mapping[str, str], strict: bool = True) -> List[Pattern]:
        """
        Registers every entry of a name -> regex mapping.

        With `strict=False` invalid entries are logged and skipped so one bad
        rule does not disable the rest; otherwise the first failure raises.
        """
        added: List[Pattern] = []
        for name, source in patterns.items():
            try:
                added.append(self.add(name, source))
            except InvalidPatternError:
                if strict:
                    raise
        return added

    @contextmanager
    def reading(self) -> Iterator[List[Pattern]]:
        """Holds the read lock and yields the patterns in registration order."""
        with self._lock.read_locked():
            yield list(self._patterns.values())

    def snapshot(self) -> List[Pattern]:
        with self._lock.read_locked():
            return list(self._patterns.values())

    def names(self) -> List[str]:
        with self._lock.read_locked():
            return list(self._patterns)

    def __contains__(self, name: object) -> bool:
        with self._lock.read_locked():
            return name in self._patterns

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._patterns)
