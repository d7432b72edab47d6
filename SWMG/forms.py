from django import forms

from SWMG.services.reconcile import FORCE_LOCAL, RESOLVE_ACTIONS


class ScoreEditForm(forms.Form):
    """One device edit as it arrives at the API boundary."""
    entryId = forms.IntegerField(min_value=1)
    hole = forms.IntegerField(min_value=1, max_value=18)
    strokes = forms.IntegerField(min_value=1, max_value=15)
    clientUpdatedAt = forms.DateTimeField()


class ConflictResolveForm(forms.Form):
    action = forms.ChoiceField(choices=[(a, a) for a in RESOLVE_ACTIONS])
    forceValue = forms.IntegerField(required=False)

    def clean_forceValue(self):
        value = self.cleaned_data.get('forceValue')
        if value is not None and not (1 <= value <= 15):
            raise forms.ValidationError("Force value must be between 1 and 15.")
        return value

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('action') != FORCE_LOCAL and cleaned.get('forceValue') is not None:
            raise forms.ValidationError("forceValue is only allowed with force-local.")
        return cleaned
