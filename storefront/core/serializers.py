import warnings

from django.conf import settings
from PIL import Image, UnidentifiedImageError
from rest_framework import serializers


class GoogleLoginSerializer(serializers.Serializer):
    idToken = serializers.CharField()


class UserSerializer(serializers.Serializer):
    id = serializers.CharField()
    email = serializers.EmailField()
    firstName = serializers.CharField(source='first_name', allow_blank=True)
    lastName = serializers.CharField(source='last_name', allow_blank=True)
    avatar = serializers.CharField(allow_null=True, required=False)
    phone = serializers.CharField(allow_null=True, required=False)
    role = serializers.CharField()
    isAdmin = serializers.BooleanField(source='is_admin')


class UploadSerializer(serializers.Serializer):
    """Image upload forwarded to the backend's /upload endpoint"""
    file = serializers.FileField()

    def validate_file(self, value):
        if value.size > settings.UPLOAD_MAX_BYTES:
            raise serializers.ValidationError(
                f"File too large ({value.size} bytes, max {settings.UPLOAD_MAX_BYTES})"
            )
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                image = Image.open(value)
                image.verify()
        except (Image.DecompressionBombError, Image.DecompressionBombWarning):
            raise serializers.ValidationError("Image dimensions are too large")
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise serializers.ValidationError("Uploaded file is not a valid image")
        finally:
            value.seek(0)
        return value
