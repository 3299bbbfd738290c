import base64

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated

from common.constants import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_MB
from common.exceptions import ValidationFailed


class ImageUploadView(APIView):
    """
    POST (multipart, field "file"): Validate an image and hand it back as a data URL.

    Images are stored inline on posts and messages, so nothing is written here.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        upload = request.FILES.get("file")
        if upload is None:
            raise ValidationFailed("No file provided")

        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationFailed("Please select a valid image file (JPEG, PNG, GIF, or WebP)")

        if upload.size > MAX_UPLOAD_MB * 1024 * 1024:
            raise ValidationFailed(f"Image must be smaller than {MAX_UPLOAD_MB}MB")

        encoded = base64.b64encode(upload.read()).decode("ascii")
        return Response({
            "success": True,
            "image_url": f"data:{upload.content_type};base64,{encoded}",
            "size": upload.size,
            "type": upload.content_type,
        })
