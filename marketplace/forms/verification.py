from django import forms
from django.core.validators import FileExtensionValidator

from ..models import AgentVerification

DOCUMENT_EXTENSIONS = ["pdf", "jpg", "jpeg", "png", "webp"]
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024


class VerificationDetailsForm(forms.ModelForm):
    specializations = forms.JSONField(required=False)

    class Meta:
        model = AgentVerification
        fields = ["business_name", "business_address", "years_of_experience", "specializations"]

    def clean_specializations(self):
        specializations = self.cleaned_data.get("specializations") or []
        if not isinstance(specializations, list):
            raise forms.ValidationError("Specializations must be a list.")
        return [str(item).strip() for item in specializations if str(item).strip()]


class DocumentUploadForm(forms.Form):
    document_type = forms.ChoiceField(choices=[(name, name.replace("_", " ").title()) for name in AgentVerification.DOCUMENT_FIELDS])
    file = forms.FileField(validators=[FileExtensionValidator(DOCUMENT_EXTENSIONS)])

    def clean_file(self):
        upload = self.cleaned_data["file"]
        if upload.size > MAX_DOCUMENT_SIZE:
            raise forms.ValidationError("Document is too large (10 MB maximum).")
        return upload
