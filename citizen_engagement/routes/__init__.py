# SPDX-License-Identifier: Apache-2.0

"""
Routes package - HTTP endpoints of the citizen engagement API.
"""
