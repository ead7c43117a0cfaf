# -*- coding: utf-8 -*-
"""Location: ./pushgateway/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Push Gateway - a self-hosted push-notification gateway with scriptable webhooks.
"""

__author__ = "Push Gateway Contributors"
__copyright__ = "Copyright 2025"
__license__ = "Apache 2.0"
__version__ = "0.9.0"
__description__ = "Self-hosted push-notification gateway with sandboxed Lua webhook plugins"
