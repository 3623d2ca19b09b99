from pathlib import Path

from django import forms
from django.core.validators import FileExtensionValidator
from PIL import Image, UnidentifiedImageError

from ..models import Property

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]
VIDEO_EXTENSIONS = ["mp4", "mov", "avi", "mkv", "webm"]
MAX_MEDIA_SIZE = 50 * 1024 * 1024


class PropertyForm(forms.ModelForm):
    amenities = forms.JSONField(required=False)

    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "price",
            "location",
            "latitude",
            "longitude",
            "type",
            "property_type",
            "category",
            "bedrooms",
            "bathrooms",
            "area",
            "amenities",
            "reservation_fee",
            "rent_period",
            "advance_months_min",
            "advance_months_max",
        ]

    def __init__(self, *args, owner=None, **kwargs):
        self.owner = owner
        super().__init__(*args, **kwargs)

    def clean_price(self):
        price = self.cleaned_data.get("price")
        if price is not None and price <= 0:
            raise forms.ValidationError("Price must be greater than zero.")
        return price

    def clean_reservation_fee(self):
        fee = self.cleaned_data.get("reservation_fee")
        if fee is not None and fee < 0:
            raise forms.ValidationError("Reservation fee cannot be negative.")
        return fee

    def clean_latitude(self):
        latitude = self.cleaned_data.get("latitude")
        if latitude is not None and not -90 <= latitude <= 90:
            raise forms.ValidationError("Latitude must be between -90 and 90.")
        return latitude

    def clean_longitude(self):
        longitude = self.cleaned_data.get("longitude")
        if longitude is not None and not -180 <= longitude <= 180:
            raise forms.ValidationError("Longitude must be between -180 and 180.")
        return longitude

    def clean_amenities(self):
        amenities = self.cleaned_data.get("amenities") or []
        if not isinstance(amenities, list) or not all(isinstance(item, str) for item in amenities):
            raise forms.ValidationError("Amenities must be a list of names.")
        return [item.strip() for item in amenities if item.strip()]

    def clean(self):
        cleaned_data = super().clean()
        minimum = cleaned_data.get("advance_months_min")
        maximum = cleaned_data.get("advance_months_max")
        if minimum is not None and maximum is not None and minimum > maximum:
            self.add_error("advance_months_max", "Maximum advance must not be lower than the minimum.")
        if cleaned_data.get("type") == "rent" and not cleaned_data.get("rent_period"):
            cleaned_data["rent_period"] = "monthly"
        return cleaned_data

    def save(self, commit=True):
        listing = super().save(commit=False)
        if not listing.pk:
            if not self.owner:
                raise ValueError("PropertyForm requires an owner to create a listing")
            listing.owner = self.owner
        if commit:
            listing.save()
        return listing


class PropertyMediaForm(forms.Form):
    file = forms.FileField(validators=[FileExtensionValidator(IMAGE_EXTENSIONS + VIDEO_EXTENSIONS)])

    def clean_file(self):
        upload = self.cleaned_data["file"]
        if upload.size > MAX_MEDIA_SIZE:
            raise forms.ValidationError("File is too large (50 MB maximum).")
        if Path(upload.name).suffix.lower().lstrip(".") in IMAGE_EXTENSIONS:
            try:
                Image.open(upload).verify()
            except (UnidentifiedImageError, OSError) as exc:
                raise forms.ValidationError("Upload a valid image.") from exc
            upload.seek(0)
        return upload
