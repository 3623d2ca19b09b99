from django import forms

from ..models import PropertyReview


class ReviewForm(forms.ModelForm):
    class Meta:
        model = PropertyReview
        fields = ["rating", "comment"]

    def clean_comment(self):
        return (self.cleaned_data.get("comment") or "").strip()
