"""Chat adapters: where pipeline results are delivered."""

from chatshell.chat.client import ChatClient
from chatshell.chat.console import ConsoleChatClient
from chatshell.chat.models import ChatDestination, UploadedFile
from chatshell.chat.slack import SlackWebClient

__all__ = [
    "ChatClient",
    "ChatDestination",
    "ConsoleChatClient",
    "SlackWebClient",
    "UploadedFile",
]
