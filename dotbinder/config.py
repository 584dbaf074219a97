import os
from typing import List, Literal, Optional

import yaml
import logging
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config/binder-config.yaml")


class BinderSettings(BaseModel):
    """
    Configuration for the binder settings.
    This class defines how dotted parameter names are split and what happens to bad paths.
    """
    delimiter: str = Field(
        ".", min_length=1, description="Character that separates path segments"
    )
    default_kind: str = Field(
        "default", description="Container kind used when a target does not declare one"
    )
    on_malformed_path: Literal["skip", "abort"] = Field(
        "skip", description="Skip the offending parameter or abort the whole instantiation"
    )
    max_depth: int = Field(
        32, ge=1, description="Deepest path accepted before it is treated as malformed"
    )

    def __init__(self, **data):
        logger.debug(f"Initializing BinderSettings with data: {data}")
        super().__init__(**data)


class CoercionSettings(BaseModel):
    """
    Configuration for leaf value coercion.
    This class defines whether Hungarian-notation names are converted and how dates are read.
    """
    enabled: bool = Field(True, description="Convert leaves whose names follow the convention")
    strip_prefix: bool = Field(
        True, description="Drop the one-letter type code from the stored key (iAge -> age)"
    )
    date_formats: List[str] = Field(
        default_factory=lambda: ["%d/%m/%Y", "%d/%m/%Y %H:%M", "%d/%m/%Y %H:%M:%S"],
        description="strptime formats tried after ISO-8601 for t/c fields",
    )

    @field_validator("date_formats")
    @classmethod
    def check_date_formats(cls, v):
        logger.debug(f"Validating date formats: {v}")
        for fmt in v:
            if "%" not in fmt:
                logger.error(f"Date format '{fmt}' has no strftime directive")
                raise ValueError(f"Date format '{fmt}' has no strftime directive")
        return v

    def __init__(self, **data):
        logger.debug(f"Initializing CoercionSettings with data: {data}")
        super().__init__(**data)


class TargetConfig(BaseModel):
    """
    Configuration for the binding target used by the command line runner.
    """
    name: str = Field("", description="Root segment to bind; empty binds every parameter")
    kind: Optional[str] = Field(None, description="Registered container kind tag, binder default when unset")

    def __init__(self, **data):
        logger.debug(f"Initializing TargetConfig with data: {data}")
        super().__init__(**data)


class LoggingConfig(BaseModel):
    """
    Configuration for logging settings.
    This class defines the logging level for the application.
    """
    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        "INFO", description="Logging level"
    )

    def __init__(self, **data):
        logger.debug(f"Initializing LoggingConfig with data: {data}")
        super().__init__(**data)


class MetricsConfig(BaseModel):
    """
    Configuration for the Prometheus metrics endpoint.
    """
    enabled: bool = Field(False, description="Start the metrics HTTP server")
    port: int = Field(8000, ge=1, le=65535, description="Port of the metrics HTTP server")

    def __init__(self, **data):
        logger.debug(f"Initializing MetricsConfig with data: {data}")
        super().__init__(**data)


class BinderConfig(BaseModel):
    """
    Configuration for the binder application.
    This class encapsulates all necessary settings for binding, coercion, the
    command line target, logging and metrics.
    """
    binder: BinderSettings = Field(default_factory=BinderSettings)
    coercion: CoercionSettings = Field(default_factory=CoercionSettings)
    target: TargetConfig = Field(default_factory=TargetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @classmethod
    def load(cls, path: str = None) -> "BinderConfig":
        """
        Load and validate the binder configuration from YAML.
        Raises a clear exception if the file is missing or invalid.
        Args:
            path (str): Location of the YAML file, defaults to CONFIG_PATH.
        Returns:
            BinderConfig: The validated configuration object.
        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ValueError: If the configuration is invalid.
        """
        path = path or CONFIG_PATH
        logger.info(f"Loading configuration from {path}")
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
                logger.debug(f"Raw config data: {data}")
        except FileNotFoundError as e:
            logger.exception(f"Configuration file not found at {path}")
            raise FileNotFoundError(f"Configuration file not found at {path}") from e

        try:
            config = cls(**data)
            logger.info("Configuration loaded and validated successfully")
            logger.debug(f"Final config object: {config}")
            return config
        except Exception as e:
            logger.exception("Invalid configuration provided")
            raise ValueError(f"Invalid configuration: {e}") from e


def get_config(path: str = None) -> BinderConfig:
    """
    Retrieve the binder configuration, loading it from the specified YAML file.
    Returns:
        BinderConfig: The validated configuration object.
    """
    logger.info("Retrieving binder configuration")
    config = BinderConfig.load(path)
    logger.debug(f"Parsed configuration object: {config}")
    return config
