# -*- coding: utf-8 -*-
"""Location: ./pushgateway/utils/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Utility helpers.
"""
