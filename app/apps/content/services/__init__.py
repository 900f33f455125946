"""
Content services module
"""
from app.apps.content.services.content_service import (
    ContentService,
    InvalidContentPayload,
    create_content_service,
)
from app.apps.content.services.health import HealthState

__all__ = ['ContentService', 'InvalidContentPayload', 'create_content_service', 'HealthState']
