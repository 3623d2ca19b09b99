from decimal import Decimal

from django import forms

from .reservation import PHONE_FIELD_OPTIONS, SERVICE_CHOICES


class WithdrawalForm(forms.Form):
    amount = forms.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("1"))
    phone = forms.RegexField(**PHONE_FIELD_OPTIONS)
    method = forms.ChoiceField(choices=SERVICE_CHOICES, initial="MTN")
