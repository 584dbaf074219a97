import logging
from collections.abc import MutableMapping
from typing import Optional, get_args

from dotbinder.coercion import LeafCoercer
from dotbinder.config import BinderConfig, BinderSettings
from dotbinder.containers import container_for, is_mapping_kind
from dotbinder.exceptions import MalformedPath, UnsupportedContainerKind
from dotbinder.merger import merge, split_path
from dotbinder.metrics import (
    INSTANTIATIONS,
    PARAMETERS_BOUND,
    PARAMETERS_SKIPPED,
    INSTANTIATE_DURATION,
)
from dotbinder.parameters import ContainerKind, Parameters, Target

logger = logging.getLogger(__name__)


class MapInstantiator:
    """
    Instantiator that builds free-form nested mappings from dot-path parameters.
    """

    def __init__(
            self,
            settings: Optional[BinderSettings] = None,
            coercer: Optional[LeafCoercer] = None,
    ):
        """
        Initialize the MapInstantiator.

        Args:
            settings (Optional[BinderSettings]): Delimiter, default kind and malformed path policy.
            coercer (Optional[LeafCoercer]): Leaf coercer, one with default settings when omitted.
        """
        self.settings = settings or BinderSettings()
        self.coercer = coercer or LeafCoercer()

    @classmethod
    def from_config(cls, cfg: BinderConfig) -> "MapInstantiator":
        return cls(cfg.binder, LeafCoercer(cfg.coercion))

    def _kind_of(self, target: Target) -> ContainerKind:
        return target.kind if target.kind is not None else self.settings.default_kind

    def is_applicable(self, target: Target) -> bool:
        """
        Will this instantiator handle *target*? Only string keyed mappings are handled.
        A parameterized kind such as dict[str, object] declares its own key type.
        """
        kind = self._kind_of(target)
        args = get_args(kind)
        key_type = args[0] if args else target.key_type
        able = (
            is_mapping_kind(kind)
            and isinstance(key_type, type)
            and issubclass(key_type, str)
        )
        logger.debug("Will kind %r with %s keys be handled by this class? %s", kind, key_type, able)
        return able

    @INSTANTIATE_DURATION.time()
    def instantiate(self, target: Target, parameters: Parameters) -> MutableMapping:
        """
        Build a nested mapping from the parameters addressing *target*.

        Args:
            target (Target): The binding target.
            parameters (Parameters): Every submitted parameter, in submission order.
        Returns:
            MutableMapping: The finished structure, owned by the caller.
        Raises:
            UnsupportedContainerKind: If the target's kind has no container, before anything is merged.
            MalformedPath: If a path is malformed and the policy is "abort".
        """
        kind = self._kind_of(target)
        root = container_for(kind)
        if root is None:
            logger.error("Target '%s' declares non-mapping kind %r", target.name, kind)
            raise UnsupportedContainerKind(f"{kind!r} is not a mapping kind")

        delimiter = self.settings.delimiter
        for parameter in parameters.for_target(target, delimiter):
            path = parameter.relative_path(target, delimiter)
            try:
                segments = split_path(path, delimiter, self.settings.max_depth)
            except MalformedPath as e:
                if self.settings.on_malformed_path == "abort":
                    logger.error("Aborting instantiation of '%s': %s", target.name, e)
                    raise
                logger.warning("Skipping parameter '%s': %s", parameter.name, e)
                PARAMETERS_SKIPPED.inc()
                continue

            value = self.coercer.coerce(segments[-1], parameter.value)
            # same key rule at every level
            segments = [self.coercer.key_for(s) for s in segments]
            root = merge(kind, root, delimiter.join(segments), value, delimiter)
            PARAMETERS_BOUND.inc()

        INSTANTIATIONS.inc()
        logger.debug("Instantiated '%s': %s", target.name, root)
        return root
