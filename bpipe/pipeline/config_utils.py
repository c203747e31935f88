"""Loads configurations from .yaml files and expands environment variables.
"""
import os

import toolz as tz
import yaml


DEFAULTS = {"log_dir": None,
            "include_time": True,
            "log_level": "INFO",
            "log_stdout": False,
            "shell": None,
            "variables": {}}

def load_config(config_file=None):
    """Load YAML config file, replacing environmental variables.

    Without a configuration file the defaults are returned, so a pipeline
    script can be run with no configuration at all.
    """
    config = {}
    if config_file:
        with open(config_file) as in_handle:
            config = yaml.safe_load(in_handle) or {}
        if not isinstance(config, dict):
            raise ValueError("Expected a mapping at the top level of %s" % config_file)
        config = _expand_paths(config)
    return _add_defaults(config)

def _add_defaults(config):
    out = dict(DEFAULTS)
    out.update(config)
    if out["variables"] is None:
        out["variables"] = {}
    if not isinstance(out["variables"], dict):
        raise ValueError("Configuration `variables` must be a mapping of names to values")
    out["variables"] = {str(k): str(v) for k, v in out["variables"].items()}
    return out

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def get_variables(config):
    """Retrieve extra script variables supplied through the configuration.
    """
    return dict(tz.get_in(["variables"], config, {}) or {})

def get_log_stdout(config):
    """Whether output of run commands is sent to stdout instead of the debug log.
    """
    return bool(tz.get_in(["log_stdout"], config, False))

def get_shell(config):
    """Retrieve the shell used for running piped commands, if configured.
    """
    return tz.get_in(["shell"], config)
