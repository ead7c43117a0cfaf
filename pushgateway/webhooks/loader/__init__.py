# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/loader/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook configuration loaders.
"""
