# Carrega módulos para registrar tabelas no metadata:
import studio.models.venue          # noqa: F401
import studio.models.class_session  # noqa: F401
import studio.models.membership     # noqa: F401
import studio.models.booking        # noqa: F401
import studio.models.attendance     # noqa: F401
import studio.models.notification   # noqa: F401

__all__: list[str] = []
