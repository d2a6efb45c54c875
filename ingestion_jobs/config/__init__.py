"""Configuration package for runtime settings and startup validation."""

from .settings import (
	AppSettings,
	SettingsLoadError,
	config_build_metrics_config,
	config_build_runner_config,
	config_build_specs_streaming_update_config,
	config_load_settings,
)

__all__ = [
	"AppSettings",
	"SettingsLoadError",
	"config_build_metrics_config",
	"config_build_runner_config",
	"config_build_specs_streaming_update_config",
	"config_load_settings",
]
