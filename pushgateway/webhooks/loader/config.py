# -*- coding: utf-8 -*-
"""Configuration loader implementation.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

This module loads webhook plugin configurations.
"""

# Standard
import os

# Third-Party
import jinja2
import yaml

# First-Party
from pushgateway.webhooks.models import WebhooksConfig


class ConfigLoader:
    """A webhook configuration loader."""

    @staticmethod
    def load_config(config: str, use_jinja: bool = True) -> WebhooksConfig:
        """Load the webhook configuration from a file path.

        Args:
            config: the configuration path.
            use_jinja: use jinja to replace env variables if true.

        Returns:
            The webhook configuration object.
        """
        with open(os.path.normpath(config), "r", encoding="utf-8") as file:
            template = file.read()
            if use_jinja:
                jinja_env = jinja2.Environment(loader=jinja2.BaseLoader(), autoescape=False)
                rendered_template = jinja_env.from_string(template).render(env=os.environ)
            else:
                rendered_template = template
            config_data = yaml.safe_load(rendered_template) or {}
        return WebhooksConfig(**config_data)

    @staticmethod
    def dump_config(path: str, config: WebhooksConfig) -> None:
        """Dump webhook configuration to a file.

        Args:
            path: configuration file path
            config: the webhook configuration
        """
        with open(os.path.normpath(path), "w", encoding="utf-8") as file:
            yaml.safe_dump(config.model_dump(exclude_none=True), file)
