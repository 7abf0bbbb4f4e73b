# twitchviewer/media/routes.py

import logging
import mimetypes
import os
import uuid

from flask import current_app, jsonify, request, send_from_directory
from werkzeug.utils import secure_filename

from twitchviewer.errors import NotFoundError, ValidationError
from twitchviewer.media import media_bp
from twitchviewer.storage import get_storage
from twitchviewer.utils import admin_required, to_api

logger = logging.getLogger(__name__)


def _extension(filename):
    return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''


def save_upload(file):
    """Writes an uploaded image under UPLOAD_FOLDER and records it in the media library."""
    filename = secure_filename(file.filename or '')
    if not filename:
        raise ValidationError("No file selected")
    if _extension(filename) not in current_app.config['ALLOWED_MEDIA_EXTENSIONS']:
        raise ValidationError(f"File type not allowed: {filename}")

    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}-{filename}"
    path = os.path.join(folder, stored_name)
    file.save(path)

    mime_type = file.mimetype
    if not mime_type or mime_type == 'application/octet-stream':
        mime_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'

    record = get_storage().create_record('media_file', {
        'filename': filename,
        'stored_name': stored_name,
        'url': f"{current_app.config['MEDIA_URL_PREFIX']}/{stored_name}",
        'mime_type': mime_type,
        'size': os.path.getsize(path),
    })
    logger.info(f"Media {record['id']} uploaded: {filename} ({record['size']} bytes)")
    return record


@media_bp.route('/api/media')
@admin_required
def list_media():
    files = get_storage().list_records('media_file')
    # newest first, as the library shows them
    files.sort(key=lambda f: f['id'], reverse=True)
    return jsonify([to_api(f) for f in files])


@media_bp.route('/api/media', methods=['POST'])
@media_bp.route('/api/media/upload', methods=['POST'])
@admin_required
def upload_media():
    file = request.files.get('file')
    if file is None:
        raise ValidationError("No file part in the request")
    return jsonify(to_api(save_upload(file))), 201


@media_bp.route('/api/media/<int:media_id>', methods=['DELETE'])
@admin_required
def delete_media(media_id):
    storage = get_storage()
    record = storage.get_record('media_file', media_id)
    if record is None:
        raise NotFoundError("Media not found")

    path = os.path.join(current_app.config['UPLOAD_FOLDER'], record['stored_name'])
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning(f"Media {media_id} file already gone: {path}")
    storage.delete_record('media_file', media_id)
    logger.info(f"Media {media_id} deleted")
    return '', 204


@media_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
