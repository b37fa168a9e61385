#!/usr/bin/env python3
"""
Gestión del esquema de base de datos de TenantLedger.

Envuelve los comandos de Alembic usando la URL configurada en app.core.config,
de modo que no hace falta repetirla en alembic.ini.
"""
import sys
import logging
from pathlib import Path

# Agregar el directorio raíz al path
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

from alembic.config import Config
from alembic import command
from app.core.config import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("migrate")


def get_alembic_config() -> Config:
    """Configuración de Alembic apuntando a la base configurada."""
    alembic_cfg = Config(str(root_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg


def create_migration(message: str):
    """Autogenerar una revisión comparando los modelos con la base."""
    command.revision(get_alembic_config(), autogenerate=True, message=message)
    logger.info(f"Migración creada: {message}")


def upgrade(revision: str = "head"):
    command.upgrade(get_alembic_config(), revision)
    logger.info(f"Base actualizada a {revision}")


def downgrade(revision: str = "-1"):
    command.downgrade(get_alembic_config(), revision)
    logger.info(f"Base revertida a {revision}")


def stamp(revision: str = "head"):
    """Marcar la base como migrada sin ejecutar nada (bases creadas con create_all)."""
    command.stamp(get_alembic_config(), revision)
    logger.info(f"Base marcada en {revision}")


def show_history():
    command.history(get_alembic_config())


def show_current():
    command.current(get_alembic_config())


def create_tables():
    """Crear todas las tablas directamente desde los modelos (solo desarrollo)."""
    from app.database.database import Base, engine
    from app.database.registry import load_models

    if settings.ENVIRONMENT == "production":
        logger.error("create-tables no está permitido en producción; use upgrade")
        sys.exit(1)
    load_models()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{len(Base.metadata.tables)} tablas verificadas")


COMMANDS = {
    "create": (create_migration, "'mensaje'", "Crear migración autogenerada"),
    "upgrade": (upgrade, "[revision]", "Ejecutar migraciones (por defecto head)"),
    "downgrade": (downgrade, "[revision]", "Revertir migraciones (por defecto -1)"),
    "stamp": (stamp, "[revision]", "Marcar revisión sin ejecutar"),
    "history": (show_history, "", "Ver historial"),
    "current": (show_current, "", "Ver revisión actual"),
    "create-tables": (create_tables, "", "Crear tablas desde los modelos (desarrollo)"),
}


def print_usage():
    print("Uso:")
    for name, (_, args, help_text) in COMMANDS.items():
        print(f"  python migrate.py {name} {args}".ljust(48) + f"# {help_text}")


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        if len(sys.argv) >= 2:
            print(f"Acción desconocida: {sys.argv[1]}")
        print_usage()
        sys.exit(1)

    action, *args = sys.argv[1:]
    if action == "create" and not args:
        print("Error: Se requiere un mensaje para la migración")
        sys.exit(1)

    handler = COMMANDS[action][0]
    handler(*args[:1])
