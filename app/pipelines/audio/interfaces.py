"""Contracts for the external collaborators the pipeline drives."""

from abc import ABC, abstractmethod

from .types import RemoteFileHandle


class RemoteFileServiceInterface(ABC):
    """Contract for the asynchronous AI file service and its generative model"""

    @abstractmethod
    async def upload_file(
        self,
        path: str,
        *,
        mime_type: str,
        display_name: str,
    ) -> RemoteFileHandle:
        ...

    @abstractmethod
    async def get_file(self, name: str) -> RemoteFileHandle:
        ...

    @abstractmethod
    async def generate_content(self, instruction: str, handle: RemoteFileHandle) -> str:
        ...


class TranscoderInterface(ABC):
    """Contract for converting media into the normalized MP3 format"""

    @abstractmethod
    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        ...
