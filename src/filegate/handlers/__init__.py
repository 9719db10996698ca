"""Request handlers for FileGate."""

from filegate.dispatch import Dispatcher
from filegate.handlers.files import FileContext, FileHandler, file_routes


def create_dispatcher(context: FileContext) -> Dispatcher:
    """Wire the file handlers into a dispatcher."""
    return Dispatcher(file_routes(FileHandler(context)))
