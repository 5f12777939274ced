"""
Structured Logging & Observability
Production-grade logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from typing import Any, Optional
from src.config import get_settings


def configure_logging():
    """
    Configure loguru for production observability.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_enrichment_transition(
    contact_id: str,
    from_status: Optional[str],
    to_status: str,
    cycle: int,
    **context
):
    """
    Structured logging for enrichment state changes.

    Args:
        contact_id: Owning contact of the enrichment record
        from_status: Previous status (None when the record is created)
        to_status: New status
        cycle: Job cycle the transition belongs to
        **context: Additional context (error detail, news count, etc.)

    Example:
        >>> log_enrichment_transition(
        ...     contact_id="665f...",
        ...     from_status="processing",
        ...     to_status="complete",
        ...     cycle=2,
        ...     news_items=4
        ... )
    """
    log_data = {
        "event_type": "enrichment_transition",
        "contact_id": contact_id,
        "from_status": from_status,
        "to_status": to_status,
        "cycle": cycle,
    }
    log_data.update(context)

    level = "WARNING" if to_status == "failed" else "INFO"
    logger.bind(**log_data).log(
        level,
        f"Enrichment {contact_id}: {from_status or '-'} -> {to_status} (cycle {cycle})"
    )


def log_business_event(
    event_type: str,
    entity_id: str,
    **details: Any
):
    """
    Log business-critical events for analytics.

    Examples:
        - Contact created / deleted
        - Task completed
        - Note pinned

    Args:
        event_type: Type of event (e.g., "contact_created", "task_completed")
        entity_id: The record involved
        **details: Event-specific data
    """
    log_data = {
        "event_type": event_type,
        "entity_id": entity_id,
        **details
    }

    logger.bind(**log_data).success(f"Business Event: {event_type}")
