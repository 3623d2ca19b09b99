from django import forms

from ..models import Profile

PASSWORD_MIN_LENGTH = 8
DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists. Please use a different email or try signing in."
SHORT_PASSWORD_MESSAGE = "Password must be at least 8 characters long."


class SignUpForm(forms.ModelForm):
    password = forms.CharField(
        min_length=PASSWORD_MIN_LENGTH,
        strip=False,
        widget=forms.PasswordInput,
        error_messages={"min_length": SHORT_PASSWORD_MESSAGE},
    )
    role = forms.ChoiceField(choices=[choice for choice in Profile.ROLE_CHOICES if choice[0] != "admin"])

    class Meta:
        model = Profile
        fields = ["email", "full_name", "role"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["full_name"].required = True

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if Profile.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError(DUPLICATE_EMAIL_MESSAGE)
        return email

    def clean_full_name(self):
        full_name = self.cleaned_data["full_name"].strip()
        if not full_name:
            raise forms.ValidationError("This field is required.")
        return full_name

    def save(self, commit=True):
        profile = super().save(commit=False)
        profile.username = profile.email[:150]
        profile.set_password(self.cleaned_data["password"])
        profile.email_verified = False
        if commit:
            profile.save()
        return profile


class CodeForm(forms.Form):
    email = forms.EmailField()
    code = forms.RegexField(regex=r"^\d{6}$", error_messages={"invalid": "Enter the 6-digit code from the email."})

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class PasswordResetForm(CodeForm):
    new_password = forms.CharField(
        min_length=PASSWORD_MIN_LENGTH,
        strip=False,
        widget=forms.PasswordInput,
        error_messages={"min_length": SHORT_PASSWORD_MESSAGE},
    )
