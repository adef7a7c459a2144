# SPDX-License-Identifier: Apache-2.0

"""
Citizen Engagement API - issue workflow service.
"""

__version__ = "1.0.0"
