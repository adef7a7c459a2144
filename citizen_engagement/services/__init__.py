# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.

Repository and issue services import the error hierarchy from
``middleware.error_handler``; import them from their modules directly.
"""

from .mongodb import MongoDBService

__all__ = [
    "MongoDBService"
]
