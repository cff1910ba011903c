from .config_schema import ProbeConfig, load_config

__all__ = ["ProbeConfig", "load_config"]
