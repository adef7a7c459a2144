# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the citizen engagement platform.
"""

from enum import Enum


class IssueState(str, Enum):
    """Issue lifecycle state enumeration."""
    NEW = "new"
    ACKNOWLEDGED = "acknowledged"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    REJECTED = "rejected"
    RESOLVED = "resolved"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is defined from this state."""
        return self in (IssueState.REJECTED, IssueState.RESOLVED)


class IssueAction(str, Enum):
    """Actions accepted by the issue workflow endpoint."""
    ACK = "ack"
    ASSIGN = "assign"
    START = "start"
    REJECT = "reject"
    RESOLVE = "resolve"
    COMMENT = "comment"
    ADD_TAGS = "addTags"
    REMOVE_TAGS = "removeTags"
    REPLACE_TAGS = "replaceTags"


class AuditActionType(str, Enum):
    """Action types recorded in an issue's audit trail."""
    ACK = "ack"
    ASSIGN = "assign"
    START = "start"
    REJECT = "reject"
    RESOLVE = "resolve"
    ADD_COMMENT = "addComment"
    ADD_TAGS = "addTags"
    REMOVE_TAGS = "removeTags"
    REPLACE_TAGS = "replaceTags"


class UserRole(str, Enum):
    """Roles carried by platform users."""
    CITIZEN = "citizen"
    STAFF = "staff"
