"""Schema management for SQL-backed providers.

The in-memory default needs none of this. With ``PROTEAN_ENV=production``
the default database is SQLite and its tables are created from the models
Protean derives for each registered aggregate and entity.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

from marketplace.domain import logger

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for provider in domain.providers.values():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield provider


def _register_models(domain: Domain, provider) -> None:
    # Touching the DAO makes Protean build and register the SQLAlchemy model
    for registry in (domain.registry.aggregates, domain.registry.entities):
        for record in registry.values():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create every table the domain's SQL providers need."""
    with domain.domain_context():
        for provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.create_all(engine)
            logger.info("Database schema created", provider=provider.name)


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.drop_all(engine)
            logger.info("Database schema dropped", provider=provider.name)
