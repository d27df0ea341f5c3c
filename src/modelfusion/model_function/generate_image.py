"""
Image generation model interface and ``generate_image``.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.errors import ModelFusionError
from modelfusion.model_function.execute_call import ModelCallResult, execute_standard_call
from modelfusion.model_function.model import Model, ModelSettings
from modelfusion.run.events import FunctionType

if TYPE_CHECKING:
    from modelfusion.model_function.model import CallOptions, ModelResponse
    from modelfusion.model_function.options import FunctionOptions

S = TypeVar("S", bound=ModelSettings)


@dataclass(frozen=True)
class ImageGenerationModelSettings(ModelSettings):
    """Settings shared by image generation models.

    Attributes:
        number_of_generations: Number of images per call
    """

    number_of_generations: int | None = None


class ImageGenerationModel(Model[S]):
    """Model that generates images; images are exchanged base64 encoded."""

    async def do_generate_images(self, prompt: Any, options: CallOptions) -> ModelResponse[list[str]]:
        """Generate images and return them base64 encoded."""
        raise NotImplementedError(f"{type(self).__name__} does not generate images")


@dataclass
class ImageGenerationFullResponse(ModelCallResult[bytes]):
    """Full response of ``generate_image``.

    Attributes:
        image_base64: First image, base64 encoded
        images: Every image as bytes
        images_base64: Every image, base64 encoded
    """

    image_base64: str = ""
    images: list[bytes] = field(default_factory=list)
    images_base64: list[str] = field(default_factory=list)


async def generate_image(
    model: ImageGenerationModel[Any],
    prompt: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> bytes | ImageGenerationFullResponse:
    """Generate an image for a prompt.

    Returns:
        The first image as bytes, or the full response with all images

    Raises:
        ModelFusionError: If the model returned no images or an image that
            is not valid base64

    Example:
        >>> image = await generate_image(model, "the wicked witch of the west in the style of early 19th century painting")
        >>> Path("witch.png").write_bytes(image)
    """
    images: list[bytes] = []

    async def generate_response(call_options: CallOptions) -> ModelResponse[list[str]]:
        response = await model.do_generate_images(prompt, call_options)
        if not response.value:
            raise ModelFusionError(f"{type(model).__name__} returned no images")
        try:
            images.extend(base64.b64decode(image, validate=True) for image in response.value)
        except binascii.Error as e:
            raise ModelFusionError(f"{type(model).__name__} returned an invalid base64 image") from e
        return response

    result = await execute_standard_call(
        function_type=FunctionType.GENERATE_IMAGE,
        model=model,
        options=options,
        input=prompt,
        generate_response=generate_response,
    )

    images_base64 = result.value

    if full_response:
        return ImageGenerationFullResponse(
            value=images[0],
            raw_response=result.raw_response,
            metadata=result.metadata,
            image_base64=images_base64[0],
            images=images,
            images_base64=images_base64,
        )
    return images[0]
