from decimal import Decimal

from django import forms

from ..models import CommissionDispute
from .reservation import MobileMoneyForm


class CommissionPaymentForm(MobileMoneyForm):
    amount = forms.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("1"))


class DisputeForm(forms.ModelForm):
    class Meta:
        model = CommissionDispute
        fields = ["dispute_type", "description"]

    def clean_description(self):
        description = self.cleaned_data["description"].strip()
        if len(description) < 10:
            raise forms.ValidationError("Please describe the problem in at least 10 characters.")
        return description
