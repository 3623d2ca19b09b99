from django import forms

from ..models import Profile


class ProfileForm(forms.ModelForm):
    remove_avatar = forms.BooleanField(required=False, label="Remove current photo")

    class Meta:
        model = Profile
        fields = ["full_name", "phone", "avatar", "bio", "location"]

    def clean_phone(self):
        phone = (self.cleaned_data.get("phone") or "").strip()
        if phone:
            digits_only = "".join(ch for ch in phone if ch.isdigit())
            if len(digits_only) < 8:
                raise forms.ValidationError("Phone number must contain at least 8 digits.")
            phone = digits_only
        return phone

    def save(self, commit=True):
        profile = super().save(commit=False)
        if self.cleaned_data.get("remove_avatar") and profile.avatar:
            profile.avatar.delete(save=False)
            profile.avatar = None
        if commit:
            profile.save()
        return profile
