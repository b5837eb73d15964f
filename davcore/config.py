import json
import logging
import os

"""
Configuration file parsing for get_davclient.

The config file is json (or yaml, if pyyaml is installed) with one
object per section:

    {
        "default": {
            "davcore_url": "https://dav.example.com/remote.php/webdav/",
            "davcore_username": "alice",
            "davcore_password": "hunter2"
        },
        "work": {
            "inherits": "default",
            "davcore_url": "https://work.example.com/dav/"
        }
    }
"""


def config_section(config, section="default"):
    """
    The settings of a section, with the settings of the section it
    inherits (recursively) as defaults.
    """
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/davcore/davcore.conf",
            f"{cfgdir}/davcore/davcore.yaml",
            f"{cfgdir}/davcore/davcore.json",
            "/etc/davcore/davcore.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is external module,
            ## and not included in the requirements.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.Loader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        logging.info("no config file found")
    except ValueError:
        if interactive_error:
            logging.error(
                "error in config file.  Be aware that the interactive configuration will ignore and overwrite the current broken config file",
                exc_info=True,
            )
        else:
            logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}
