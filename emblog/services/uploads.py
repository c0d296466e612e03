import logging
import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from emblog.errors import ValidationError

logger = logging.getLogger(__name__)


def save_image(file_storage):
    """Store an uploaded image and return the path it is served from.

    Returns None when no file was sent.
    """
    if file_storage is None or not file_storage.filename:
        return None

    filename = secure_filename(file_storage.filename)
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if ext not in current_app.config['ALLOWED_IMAGE_EXTENSIONS']:
        raise ValidationError('Only image uploads are allowed')

    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    stored_name = f'{uuid.uuid4().hex}.{ext}'
    file_storage.save(os.path.join(folder, stored_name))
    logger.info('Stored upload %s', stored_name)
    return f'/uploads/{stored_name}'


def discard_image(path):
    """Remove a file stored by save_image. Accepts the ``/uploads/...`` path."""
    if not path:
        return
    stored_name = os.path.basename(path)
    try:
        os.remove(os.path.join(current_app.config['UPLOAD_FOLDER'], stored_name))
    except FileNotFoundError:
        return
    logger.info('Discarded upload %s', stored_name)
