"""Image upload and retrieval endpoints."""
import logging
from flask import current_app, jsonify, request, send_file, url_for
from supportdesk.blueprints.images import images_bp
from supportdesk.errors import MissingFile, UploadRejected
from supportdesk.extensions import db, get_storage
from supportdesk.services import upload_service

logger = logging.getLogger(__name__)


def _single_upload():
    """The one file part of the request, under the ``image`` field."""
    total = sum(len(request.files.getlist(key)) for key in request.files)
    if total == 0:
        raise MissingFile()
    if total > 1:
        raise UploadRejected("Only one image file may be uploaded per request")

    upload = request.files.get("image")
    if upload is None or not upload.filename:
        raise MissingFile()
    return upload


@images_bp.route("/upload-image", methods=["POST"])
def upload_image():
    upload = _single_upload()
    data = upload.read()

    try:
        image = upload_service.store_upload(
            get_storage(),
            db.session,
            data,
            original_name=upload.filename,
            declared_type=upload.mimetype,
            reported_type=request.form.get("mimeType"),
            original_size=request.form.get("originalSize"),
            compressed_size=request.form.get("compressedSize"),
            user_id=upload_service.parse_user_id(request.headers.get("X-User-ID")),
            max_size=current_app.config["MAX_IMAGE_SIZE"],
        )
    except UploadRejected as e:
        logger.info("Upload of %r rejected: %s", upload.filename, e.message)
        raise

    return jsonify(
        success=True,
        imageId=image.id,
        filename=image.filename,
        originalName=image.original_name,
        originalSize=image.size,
        compressedSize=image.compressed_size,
        mimeType=image.mime_type,
        previewUrl=url_for("images.get_image", image_id=image.id, _external=True),
    ), 201


@images_bp.route("/image/<image_id>")
def get_image(image_id):
    """Stream stored bytes inline with the stored MIME type."""
    image_id = upload_service.parse_image_id(image_id)
    image = upload_service.get_image_file(get_storage(), db.session, image_id)

    resp = send_file(image.file_path, mimetype=image.mime_type)
    resp.headers["Content-Disposition"] = f'inline; filename="{image.filename}"'
    return resp


@images_bp.route("/image/<image_id>/metadata")
def get_image_metadata(image_id):
    image_id = upload_service.parse_image_id(image_id)
    image = upload_service.get_image(db.session, image_id)
    return jsonify(success=True, image=image.to_metadata())
