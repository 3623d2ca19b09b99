from decimal import Decimal

from django import forms
from django.utils import timezone

from ..gateway import SERVICES
from ..models import Reservation

SERVICE_CHOICES = [(service, service) for service in SERVICES]
PHONE_FIELD_OPTIONS = {
    "regex": r"^\+?\d{8,15}$",
    "error_messages": {"invalid": "Enter a valid mobile money number."},
}


class ReservationForm(forms.ModelForm):
    class Meta:
        model = Reservation
        fields = ["reservation_date", "reservation_time", "amount", "notes"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["amount"].required = False

    def clean_reservation_date(self):
        reservation_date = self.cleaned_data["reservation_date"]
        if reservation_date < timezone.localdate():
            raise forms.ValidationError("Reservation date cannot be in the past.")
        return reservation_date

    def clean_amount(self):
        amount = self.cleaned_data.get("amount")
        if amount is None:
            return Decimal("0")
        if amount < 0:
            raise forms.ValidationError("Amount cannot be negative.")
        return amount


class MobileMoneyForm(forms.Form):
    phone = forms.RegexField(**PHONE_FIELD_OPTIONS)
    service = forms.ChoiceField(choices=SERVICE_CHOICES, initial="MTN")


class CancellationForm(forms.Form):
    reason = forms.CharField(required=False, max_length=500)
