# images.py — DALL·E art for the site: avatar, cartoon avatar, hero, dashboard background
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests
from flask import Blueprint, jsonify

from .ai_client import generate_image_url
from .config import Config, logger
from .filesystem_manager import StaticAssetStore

images_bp = Blueprint("images_bp", __name__)

AVATAR_FALLBACK = "/bendavis.jpg"


@dataclass(frozen=True)
class ImageJob:
    prompt: str
    size: str
    quality: str
    style: str
    filename: Optional[str] = None


AVATAR = ImageJob(
    prompt=(
        "Create a friendly, professional cartoon avatar of an elderly businessman with glasses, warm smile, "
        "wearing a blue sweater over a collared shirt. The style should be approachable and trustworthy, "
        "similar to a car dealership owner. Circular avatar style with soft blue background. "
        "Professional but warm and welcoming appearance."
    ),
    size="1024x1024", quality="standard", style="natural",
)

CARTOON_AVATAR = ImageJob(
    prompt=(
        "Create a friendly cartoon avatar of a smiling elderly man with glasses, gray/white hair, wearing a "
        "blue sweater. The style should be like a Pixar character or friendly illustrated mascot. Round face, "
        "warm smile, professional but approachable. Head and shoulders view. Clean, simple cartoon style with "
        "soft colors. Background should be light blue or white."
    ),
    size="1024x1024", quality="standard", style="vivid", filename="ben-cartoon.png",
)

HERO = ImageJob(
    prompt=(
        "Heritage-focused hero image capturing the Ben Davis Automotive legacy in Auburn, Indiana - "
        "'Home of the Classics'. Create a warm, nostalgic composition that blends Auburn's classic automotive "
        "heritage with family dealership tradition. Show a classic 1930s Auburn Cord Duesenberg-style vintage "
        "car in the foreground (honoring Auburn's automotive golden age), alongside modern Chevrolet, Buick, and "
        "Ford vehicles, symbolizing how Ben Davis connects Auburn's past to its present. Include the Auburn town "
        "square or courthouse in the soft-focus background, warm golden hour lighting suggesting trust and "
        "community values, maybe an American flag or 'Auburn - Home of the Classics' sign subtly visible. The "
        "image should feel like a tribute to entrepreneurial spirit, family values, and community dedication - "
        "capturing the essence of why Ben Davis (1937-2014) was inducted into the DeKalb County Business Hall of "
        "Fame. Style: Cinematic, warm tones, heritage documentary photography that honors both automotive "
        "history and family legacy."
    ),
    size="1792x1024", quality="hd", style="natural", filename="hero-image.jpg",
)

DASHBOARD_BG = ImageJob(
    prompt=(
        "NO TEXT OR WORDS ANYWHERE. Create a cartoon-style background inspired by Pixar's Cars movie aesthetic "
        "for a car dealership dashboard. Show a stylized cartoon automotive dealership showroom floor with glossy "
        "reflective surfaces, soft ambient lighting, and subtle automotive elements like tire tracks patterns on "
        "the floor. Use warm colors with burgundy/red accents. The style should be clean, professional yet "
        "playful like the Cars movie - smooth gradients, soft shadows, and a slight glossy sheen. Background "
        "only, no cars or characters, just the environment. Subtle and not too busy, suitable as a dashboard "
        "background."
    ),
    size="1792x1024", quality="hd", style="vivid", filename="dashboard-bg.jpg",
)

asset_store = StaticAssetStore(base_dir=Config.STATIC_DIR)


class ImageGenerationError(RuntimeError):
    pass


def render_and_save(job: ImageJob, store: StaticAssetStore = None) -> str:
    """Generate, download and store one image; returns its public path."""
    store = store or asset_store
    url = generate_image_url(job.prompt, job.size, job.quality, job.style)
    if not url:
        raise ImageGenerationError("No image URL in response")

    r = requests.get(url, timeout=Config.IMAGE_DOWNLOAD_TIMEOUT_S)
    r.raise_for_status()

    ok, result = store.write_bytes(job.filename, r.content)
    if not ok:
        raise ImageGenerationError(f"Could not save {job.filename}: {result}")
    logger.info("Saved generated image %s (%d bytes)", result, len(r.content))
    return result


@images_bp.route("/api/generate-avatar", methods=["POST"])
def generate_avatar():
    try:
        image_url = generate_image_url(AVATAR.prompt, AVATAR.size, AVATAR.quality, AVATAR.style)
    except Exception as e:
        logger.error("Avatar generation error: %s", e, exc_info=True)
        image_url = None
    return jsonify({"imageUrl": image_url or AVATAR_FALLBACK})


def _save_route(job: ImageJob, label: str):
    try:
        path = render_and_save(job)
    except ImageGenerationError as e:
        logger.warning("%s generation produced no image: %s", label, e)
        return jsonify({"success": False, "error": "Failed to generate image"})
    except Exception as e:
        logger.error("%s generation error: %s", label, e, exc_info=True)
        return jsonify({"success": False, "error": "Generation failed"})
    return jsonify({"success": True, "imageUrl": path})


@images_bp.route("/api/create-cartoon-avatar", methods=["POST"])
def create_cartoon_avatar():
    return _save_route(CARTOON_AVATAR, "Cartoon")


@images_bp.route("/api/generate-hero", methods=["POST"])
def generate_hero():
    return _save_route(HERO, "Hero")


@images_bp.route("/api/generate-dashboard-bg", methods=["POST"])
def generate_dashboard_bg():
    try:
        path = render_and_save(DASHBOARD_BG)
    except Exception as e:
        logger.error("Error generating dashboard background: %s", e, exc_info=True)
        return jsonify({"error": "Failed to generate dashboard background"}), 500
    return jsonify({"success": True, "message": "Cars-style dashboard background created!", "path": path})
