"""
Image upload storage for avatars and post media.

Files land in UPLOAD_FOLDER/<kind>/<epoch-millis><ext>; the database keeps the
posix path "public/<kind>/<name>" which is also the URL they are served from.
"""
from __future__ import annotations

import logging
import os
import posixpath
import time

from flask import abort, current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

AVATARS = "avatars"
MEDIA = "media"
PUBLIC_PREFIX = "public"

logger = logging.getLogger(__name__)


def check_image(file: FileStorage | None) -> None:
    """abort(400) unless file is a png or jpeg upload."""
    if file is None:
        return
    if file.mimetype not in current_app.config["ALLOWED_IMAGE_TYPES"]:
        abort(400, description="File Type Unsupported")


def _disk_path(public_path: str) -> str:
    relative = public_path[len(PUBLIC_PREFIX) + 1:] if public_path.startswith(PUBLIC_PREFIX + "/") else public_path
    return os.path.join(current_app.config["UPLOAD_FOLDER"], *relative.split("/"))


def save_image(file: FileStorage, kind: str) -> str:
    """Store an already checked image and return its public posix path."""
    folder = os.path.join(current_app.config["UPLOAD_FOLDER"], kind)
    os.makedirs(folder, exist_ok=True)

    _, ext = os.path.splitext(secure_filename(file.filename or ""))
    name = f"{int(time.time() * 1000)}{ext.lower()}"
    # two uploads within the same millisecond
    while os.path.exists(os.path.join(folder, name)):
        name = f"{int(time.time() * 1000)}-{os.urandom(2).hex()}{ext.lower()}"

    file.save(os.path.join(folder, name))
    return posixpath.join(PUBLIC_PREFIX, kind, name)


def remove_image(public_path: str | None) -> None:
    """Delete a stored image; a file that is already gone is ignored."""
    if not public_path:
        return
    try:
        os.remove(_disk_path(public_path))
    except FileNotFoundError:
        logger.info("Upload %s already removed", public_path)
