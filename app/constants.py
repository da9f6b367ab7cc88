"""
Constants for service identity and workflow event types
"""

SERVICE_NAME = "hr-workflow-backend"

# Workflow event types written by the employee lifecycle
WORKFLOW_ONBOARDING = "Onboarding"
WORKFLOW_TRANSFER = "Transfer"
WORKFLOW_FIELD_UPDATES = "Field Updates"
WORKFLOW_EMPLOYEE_DELETED = "Employee Deleted"
WORKFLOW_REQUEST_PREFIX = "Request-"

# Placeholders used in human-readable workflow details
NO_DEPARTMENT = "No Department"
UNASSIGNED_POSITION = "Unassigned"
NOT_AVAILABLE = "N/A"
NO_TRACKED_CHANGES = "No tracked fields changed"
