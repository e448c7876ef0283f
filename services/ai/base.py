"""Protocol and error types for remote image editing providers."""

from __future__ import annotations

from typing import Protocol

from ..image_codec import EncodedImage


class EditRequestError(RuntimeError):
    pass


class TransportError(EditRequestError):
    """The remote call could not be completed."""


class NoImageInResponse(EditRequestError):
    """The remote call completed but returned no image part."""


class ImageEditor(Protocol):
    @property
    def available(self) -> bool:
        ...

    async def request_edit(self, image: EncodedImage, instruction: str) -> EncodedImage:
        ...
