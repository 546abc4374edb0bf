"""
Dependency Injection Container

Central container for dependency injection using dependency-injector library.
Wires the snapshot source and report service together.
"""

from dependency_injector import containers, providers

from insights_core.config import settings
from insights_core.services.report_service import ReportService
from insights_core.services.snapshot_storage import SnapshotStorage


class Container(containers.DeclarativeContainer):
    """
    Application dependency injection container.

    Usage:
        container = Container()
        report_service = container.report_service()

        # Override for testing
        container.sample_source.override(InMemorySampleSource())
    """

    app_settings = providers.Object(settings)

    # ========== Repositories ==========

    sample_source = providers.Singleton(
        SnapshotStorage,
        table_name=settings.SNAPSHOT_TABLE_NAME
    )

    # ========== Services ==========

    report_service = providers.Factory(
        ReportService,
        sample_source=sample_source,
        settings=app_settings
    )


# Global container instance
container = Container()


def get_container() -> Container:
    """
    Get the global container instance.

    Example:
        from insights_core.container import get_container

        report = await get_container().report_service().build_report(ids, window)
    """
    return container
