# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the citizen engagement platform.

This package contains pure business logic functions with no side effects.
Issues are immutable values: every operation returns a new aggregate.
"""
