# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

Authentication decorators and the error handling of the citizen engagement API.
"""