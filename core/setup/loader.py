"""
Algorithm Loader - find and construct exactly one algorithm from an artifact.

CRITICAL RESPONSIBILITIES:
1. Load the artifact (a .py file or an importable module name)
2. Enumerate candidate algorithm types (concrete IAlgorithm subclasses
   defined in the artifact itself)
3. Select exactly ONE candidate via the type selector
4. Construct it inside the Isolator, under a hard time limit

The whole load runs on the isolator worker: module-level code in the
artifact is as untrusted as the constructor.

Failures are typed (all InstantiationError):
- NoMatchingTypeError: zero candidates selected
- AmbiguousTypeError: more than one candidate selected
- InstantiationTimeoutError: load + construction exceeded the time limit
- ConstructionFaultError: artifact missing / failed to import / constructor
  raised, or the artifact tried to exit the process (SystemExit)
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import sys
import uuid
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from types import ModuleType
from typing import Callable, List, Optional, Tuple, Union

from core.algorithm import IAlgorithm
from core.logging import LogStream, get_logger, log_performance
from core.setup.isolator import Isolator, IsolatorFaultError, IsolatorTimeoutError

logger = get_logger(LogStream.SETUP)

TypeSelector = Callable[[str], bool]
ArtifactReference = Union[str, Path]


# ============================================================================
# ERRORS
# ============================================================================

class InstantiationError(Exception):
    """Base class: the algorithm could not be instantiated."""


class NoMatchingTypeError(InstantiationError):
    """No candidate type passed the selector."""


class AmbiguousTypeError(InstantiationError):
    """More than one candidate type passed the selector."""


class InstantiationTimeoutError(InstantiationError):
    """Loading or construction did not finish within the time limit."""


class ConstructionFaultError(InstantiationError):
    """The artifact could not be imported or the constructor raised."""


# ============================================================================
# TYPE NAME MATCHING
# ============================================================================

def match_type_name(current_type_full_name: str, expected_type_name: Optional[str]) -> bool:
    """
    Match a type name as namespace qualified or just the name.

    Empty / None expected name always matches.

    Examples:
        match_type_name("namespace.Foo", "Foo")            -> True
        match_type_name("namespace.Foo", "namespace.Foo")  -> True
        match_type_name("namespace.Bar", "Foo")            -> False
    """
    if not expected_type_name:
        return True
    return (
        current_type_full_name == expected_type_name
        or current_type_full_name.rsplit(".", 1)[-1] == expected_type_name
    )


def type_name_selector(expected_type_name: Optional[str]) -> TypeSelector:
    """Selector predicate for match_type_name()."""
    return lambda full_name: match_type_name(full_name, expected_type_name)


# ============================================================================
# CANDIDATES
# ============================================================================

@dataclass(frozen=True)
class AlgorithmCandidate:
    """Algorithm type discovered in an artifact."""
    full_name: str
    algorithm_type: type


def discover_candidates(module: ModuleType, namespace: str) -> List[AlgorithmCandidate]:
    """
    Concrete IAlgorithm subclasses defined in *module* (imports excluded).

    Returns:
        Candidates sorted by full name
    """
    candidates = []
    for obj in vars(module).values():
        if not inspect.isclass(obj) or not issubclass(obj, IAlgorithm):
            continue
        if obj.__module__ != module.__name__ or inspect.isabstract(obj):
            continue
        candidates.append(AlgorithmCandidate(f"{namespace}.{obj.__qualname__}", obj))

    return sorted(candidates, key=lambda c: c.full_name)


def _is_file_reference(artifact: ArtifactReference) -> bool:
    if isinstance(artifact, Path):
        return True
    return artifact.endswith(".py") or "/" in artifact or "\\" in artifact


def _artifact_module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:16]
    return f"_algohost_artifact_{digest}_{uuid.uuid4().hex[:8]}"


# ============================================================================
# LOADER
# ============================================================================

class Loader:
    """
    Loads one algorithm instance from an artifact.

    Usage:
        loader = Loader(
            load_timeout=timedelta(seconds=10),
            type_selector=type_name_selector("BuyAndHoldAlgorithm"),
        )
        ok, algorithm, error = loader.try_create_algorithm_instance("algorithms/buy_and_hold.py")
    """

    DEFAULT_LOAD_TIMEOUT = timedelta(seconds=10)

    def __init__(
        self,
        load_timeout: Union[timedelta, float] = DEFAULT_LOAD_TIMEOUT,
        type_selector: Optional[TypeSelector] = None,
        isolator: Optional[Isolator] = None
    ):
        """
        Args:
            load_timeout: Max time for load + construction (must be > 0)
            type_selector: Predicate over full type names (None = match all)
            isolator: Isolation boundary (new one per loader by default)

        Raises:
            ValueError: load_timeout not positive
        """
        if not isinstance(load_timeout, timedelta):
            load_timeout = timedelta(seconds=float(load_timeout))
        if load_timeout <= timedelta(0):
            raise ValueError(f"load_timeout must be positive, got {load_timeout}")

        self.load_timeout = load_timeout
        self.type_selector: TypeSelector = type_selector or type_name_selector(None)
        self.isolator = isolator or Isolator()

    @log_performance(LogStream.SETUP)
    def create_algorithm_instance(self, artifact: ArtifactReference) -> IAlgorithm:
        """
        Load the artifact and construct the single selected algorithm.

        Raises:
            InstantiationError: see module docstring for subclasses
        """
        logger.info(f"Loading algorithm from {artifact} (timeout={self.load_timeout})")

        try:
            algorithm = self.isolator.execute_with_time_limit(
                self.load_timeout,
                lambda: self._load(artifact),
                name="AlgorithmLoader"
            )
        except IsolatorTimeoutError as e:
            raise InstantiationTimeoutError(
                f"Algorithm instantiation from {artifact} timed out after "
                f"{self.load_timeout.total_seconds():g} seconds"
            ) from e
        except IsolatorFaultError as e:
            raise ConstructionFaultError(f"Algorithm instantiation from {artifact} aborted: {e}") from e

        logger.info(f"Created algorithm instance: {type(algorithm).__qualname__}")
        return algorithm

    def try_create_algorithm_instance(
        self,
        artifact: ArtifactReference
    ) -> Tuple[bool, Optional[IAlgorithm], str]:
        """
        Non-raising form of create_algorithm_instance().

        Returns:
            (success, algorithm or None, error message or "")
        """
        try:
            return True, self.create_algorithm_instance(artifact), ""
        except InstantiationError as e:
            logger.error(f"Loader.try_create_algorithm_instance(): {e}")
            return False, None, str(e)

    # ------------------------------------------------------------------------
    # Worker side (runs on the isolator thread)
    # ------------------------------------------------------------------------

    def _load(self, artifact: ArtifactReference) -> IAlgorithm:
        module, namespace, temp_name = self._import_artifact(artifact)
        try:
            candidate = self._select(discover_candidates(module, namespace), artifact)

            try:
                algorithm = candidate.algorithm_type()
            except Exception as e:
                raise ConstructionFaultError(
                    f"Failed to construct {candidate.full_name}: {type(e).__name__}: {e}"
                ) from e

            return algorithm
        finally:
            if temp_name is not None:
                sys.modules.pop(temp_name, None)

    def _select(self, candidates: List[AlgorithmCandidate], artifact: ArtifactReference) -> AlgorithmCandidate:
        if not candidates:
            raise NoMatchingTypeError(f"Unable to locate any algorithm type in {artifact}")

        selected = [c for c in candidates if self.type_selector(c.full_name)]
        if not selected:
            raise NoMatchingTypeError(
                f"No algorithm type in {artifact} matches the configured type name. "
                f"Available: {[c.full_name for c in candidates]}"
            )
        if len(selected) > 1:
            raise AmbiguousTypeError(
                f"Found {len(selected)} algorithm types in {artifact}: "
                f"{[c.full_name for c in selected]}. Configure a type name to pick one"
            )

        return selected[0]

    @staticmethod
    def _import_artifact(artifact: ArtifactReference) -> Tuple[ModuleType, str, Optional[str]]:
        """
        Returns:
            (module, namespace for full names, temporary sys.modules key or None)
        """
        if not _is_file_reference(artifact):
            try:
                module = importlib.import_module(str(artifact))
            except Exception as e:
                raise ConstructionFaultError(
                    f"Unable to import algorithm module {artifact}: {type(e).__name__}: {e}"
                ) from e
            return module, module.__name__, None

        path = Path(artifact).expanduser().resolve()
        if not path.is_file():
            raise ConstructionFaultError(f"Algorithm artifact not found: {path}")

        module_name = _artifact_module_name(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ConstructionFaultError(f"Unable to import algorithm artifact {path}")

        module = importlib.util.module_from_spec(spec)
        # Registered while executing so dataclasses / typing inside the
        # artifact can resolve their own module
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ConstructionFaultError(
                f"Unable to import algorithm artifact {path}: {type(e).__name__}: {e}"
            ) from e
        except BaseException:
            # SystemExit / KeyboardInterrupt: unregister, the isolator reports it
            sys.modules.pop(module_name, None)
            raise

        return module, path.stem, module_name
