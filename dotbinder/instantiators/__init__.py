import logging
from typing import Iterable, Optional

from dotbinder.exceptions import NoApplicableInstantiator
from dotbinder.parameters import Target
from .map_instantiator import MapInstantiator

logger = logging.getLogger(__name__)


def get_instantiator(target: Target, candidates: Optional[Iterable] = None):
    """
    Factory to return the first instantiator able to build *target*.
    Candidates are tried in order; a default MapInstantiator is the only one when none are given.
    """
    candidates = [MapInstantiator()] if candidates is None else list(candidates)
    for instantiator in candidates:
        if instantiator.is_applicable(target):
            logger.debug("Instantiator %s selected for '%s'", type(instantiator).__name__, target.name)
            return instantiator
    raise NoApplicableInstantiator(f"No instantiator can build target '{target.name}' ({target.kind!r})")
