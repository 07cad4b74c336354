"""Shot image rendering using Google Gemini/Imagen.

Based on Google Gemini API documentation best practices:
- Images placed FIRST in prompt for better results
- Inline data kept under 20MB
- Specific, detailed instructions
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from io import BytesIO
from typing import Optional

from PIL import Image

from mvdirector.config import Config, config as default_config
from mvdirector.errors import CapabilityError, MissingCredentialError
from mvdirector.models.schemas import AspectRatio, GeneratedImage
from mvdirector.services.credentials import CredentialProvider, EnvCredentialProvider
from mvdirector.services.text_generator import ImageAttachment

logger = logging.getLogger(__name__)

# Inline request limit (20MB as per documentation)
INLINE_DATA_LIMIT = 20 * 1024 * 1024

# Imagen returns at most this many images per call
IMAGEN_BATCH_SIZE = 4

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/webp"}


def load_reference_image(data: bytes, max_side: int = 2048) -> ImageAttachment:
    """Normalize uploaded bytes into an attachment the image models accept.

    Unsupported formats are re-encoded as PNG; images over the inline limit
    are downscaled.
    """
    img = Image.open(BytesIO(data))
    mime_type = Image.MIME.get(img.format or "", "")

    if mime_type in SUPPORTED_MIME_TYPES and len(data) <= INLINE_DATA_LIMIT:
        return ImageAttachment(data=data, mime_type=mime_type)

    if len(data) > INLINE_DATA_LIMIT:
        img.thumbnail((max_side, max_side))
        logger.info(f"Downscaled reference image to {img.size}")

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return ImageAttachment(data=buffer.getvalue(), mime_type="image/png")


class ImageGenerator:
    """Render stills for a shot using Gemini image models or Imagen."""

    def __init__(
        self,
        config: Optional[Config] = None,
        credentials: Optional[CredentialProvider] = None,
    ):
        self.config = config or default_config
        # Image models are Google-only, whatever the text backend is
        self.credentials = credentials or EnvCredentialProvider(self.config, backend="gemini")
        self._client = None
        self._client_key: Optional[str] = None

    def _get_client(self):
        """Lazy load Gemini client."""
        api_key = self.credentials.get_credential()
        if not api_key:
            raise MissingCredentialError("No Google API key configured")
        if self._client is None or self._client_key != api_key:
            from google import genai

            self._client = genai.Client(api_key=api_key)
            self._client_key = api_key
        return self._client

    def generate_images(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        count: int = 1,
        model: Optional[str] = None,
        reference_images: Optional[list[ImageAttachment]] = None,
    ) -> list[GeneratedImage]:
        """
        Render ``count`` images for a shot prompt.

        Args:
            prompt: The shot's image prompt
            aspect_ratio: One of 21:9, 16:9, 1:1, 9:16
            count: Number of images, 1-20
            model: Optional model override. Gemini models support reference
                images; Imagen models are text-to-image only.
            reference_images: Optional reference stills (characters, style)

        Returns:
            Rendered images in completion order

        Raises:
            ValueError: aspect ratio or count out of range
            CapabilityError: every render failed
        """
        ratio = AspectRatio(aspect_ratio).value
        max_count = self.config.image.max_images_per_request
        if not 1 <= count <= max_count:
            raise ValueError(f"count must be between 1 and {max_count}, got {count}")
        if not prompt or not prompt.strip():
            raise ValueError("prompt must not be empty")

        client = self._get_client()
        model_name = model or self.config.image.model
        references = reference_images or []

        logger.info("=" * 60)
        logger.info(f"SHOT IMAGE PROMPT (model={model_name}):")
        logger.info("-" * 60)
        for line in prompt.split("\n"):
            logger.info(line)
        logger.info(f"Count: {count}, Refs: {len(references)}, Ratio: {ratio}")
        logger.info("=" * 60)

        if "gemini" in model_name.lower():
            return self._generate_gemini(client, model_name, prompt, ratio, count, references)
        if references:
            logger.warning(f"{model_name} ignores reference images")
        return self._generate_imagen(client, model_name, prompt, ratio, count)

    def _generate_gemini(
        self,
        client,
        model_name: str,
        prompt: str,
        aspect_ratio: str,
        count: int,
        references: list[ImageAttachment],
    ) -> list[GeneratedImage]:
        """One image per call; calls run in parallel."""
        from google.genai import types

        # Gemini 3 Pro supports up to 14 reference images, 2.5 Flash up to 4
        is_pro_model = "gemini-3" in model_name.lower() or "pro" in model_name.lower()
        max_ref_images = 14 if is_pro_model else 4

        # IMAGES FIRST - placing images before the text prompt gives better results
        contents = [
            types.Part.from_bytes(data=ref.data, mime_type=ref.mime_type)
            for ref in references[:max_ref_images]
        ]
        if contents:
            contents.append(
                "REFERENCE IMAGES ABOVE: Maintain the EXACT appearance of the characters "
                "(face, hair, clothing, colors) and match the visual style. "
                "Composition and camera angle come from the prompt below."
            )
        contents.append(f"GENERATE THIS SHOT: {prompt}")

        generate_content_config = types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )

        def generate_single_image(index: int) -> Optional[GeneratedImage]:
            response = client.models.generate_content(
                model=model_name,
                contents=contents,
                config=generate_content_config,
            )
            for part in response.parts or []:
                if part.text is not None:
                    # Model may return text description along with image
                    logger.debug(f"Model text response: {part.text[:100]}...")
                elif part.inline_data is not None:
                    return GeneratedImage.from_bytes(
                        part.inline_data.data,
                        part.inline_data.mime_type or "image/png",
                    )
            logger.warning(f"Image {index + 1}/{count}: no image in response")
            return None

        images: list[GeneratedImage] = []
        errors: list[str] = []
        max_workers = max(1, min(self.config.image.max_workers, count))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(generate_single_image, i): i for i in range(count)}
            for future in as_completed(futures):
                idx = futures[future]
                try:
                    image = future.result()
                except Exception as e:
                    logger.error(f"Image {idx + 1}/{count} failed: {e}")
                    errors.append(str(e))
                    continue
                if image is not None:
                    images.append(image)

        if not images:
            raise CapabilityError(errors[0] if errors else "No images were generated")
        if len(images) < count:
            logger.warning(f"Generated {len(images)}/{count} images")
        return images

    def _generate_imagen(
        self,
        client,
        model_name: str,
        prompt: str,
        aspect_ratio: str,
        count: int,
    ) -> list[GeneratedImage]:
        """Imagen renders up to four images per call."""
        from google.genai import types

        images: list[GeneratedImage] = []
        remaining = count
        while remaining > 0:
            batch = min(remaining, IMAGEN_BATCH_SIZE)
            try:
                response = client.models.generate_images(
                    model=model_name,
                    prompt=prompt,
                    config=types.GenerateImagesConfig(
                        number_of_images=batch,
                        aspect_ratio=aspect_ratio,
                    ),
                )
            except Exception as e:
                logger.error(f"Imagen generation failed: {e}")
                if images:
                    break
                raise CapabilityError(str(e)) from e

            for generated in response.generated_images or []:
                if generated.image and generated.image.image_bytes:
                    images.append(GeneratedImage.from_bytes(
                        generated.image.image_bytes,
                        generated.image.mime_type or "image/png",
                    ))
            remaining -= batch

        if not images:
            raise CapabilityError("No images were generated")
        return images
