from django import forms

from ..models import Message, Profile, Property


class MessageForm(forms.Form):
    receiver = forms.ModelChoiceField(queryset=Profile.objects.filter(is_active=True))
    content = forms.CharField(required=False, strip=True)
    property = forms.ModelChoiceField(queryset=Property.objects.all(), required=False)
    attachment_url = forms.CharField(required=False, max_length=500)
    attachment_type = forms.CharField(required=False, max_length=50)
    reply_to = forms.ModelChoiceField(queryset=Message.objects.all(), required=False)

    def __init__(self, *args, sender=None, **kwargs):
        super().__init__(*args, **kwargs)
        if sender is None:
            raise ValueError("MessageForm requires a sender")
        self.sender = sender

    def clean_receiver(self):
        receiver = self.cleaned_data["receiver"]
        if receiver.pk == self.sender.pk:
            raise forms.ValidationError("You cannot send a message to yourself.")
        return receiver

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get("content") and not cleaned_data.get("attachment_url"):
            raise forms.ValidationError("A message needs text or an attachment.")
        return cleaned_data
