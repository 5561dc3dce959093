# PATH: /OperativeX/jobs/forms.py
from django import forms
from django.forms import BaseFormSet, formset_factory

from machines.models import Machine, Process
from users.forms import TailwindFormMixin


class JobCardForm(TailwindFormMixin, forms.Form):
    job_id = forms.CharField(label="Job ID", max_length=50)
    customer_name = forms.CharField(label="Customer", max_length=200)
    start_date = forms.DateField(label="Start Date", widget=forms.DateInput(attrs={"type": "date"}))
    required_date = forms.DateField(label="Required Date", widget=forms.DateInput(attrs={"type": "date"}))

    def clean_job_id(self):
        return self.cleaned_data["job_id"].strip()

    def clean(self):
        cleaned = super().clean()
        start, required = cleaned.get("start_date"), cleaned.get("required_date")
        if start and required and required < start:
            self.add_error("required_date", "Required date cannot be before the start date.")
        return cleaned


class SubJobForm(TailwindFormMixin, forms.Form):
    """One sub-job row: card details, selected processes and the machines.

    The chosen machines go out as a flat list, so the first one applies to
    every selected process that has no pairing of its own.
    """

    sub_job_id = forms.CharField(label="Sub Job ID", max_length=50)
    color = forms.CharField(label="Color", max_length=100, required=False)
    card_size = forms.CharField(label="Card Size", max_length=100, required=False)
    card_quantity = forms.IntegerField(label="Card Qty", min_value=0, required=False)
    item_quantity = forms.IntegerField(label="Item Qty", min_value=0, required=False)
    description = forms.CharField(label="Description", required=False, widget=forms.Textarea(attrs={"rows": 2}))
    processes = forms.MultipleChoiceField(
        label="Processes", required=False, widget=forms.CheckboxSelectMultiple,
    )
    machines = forms.ModelMultipleChoiceField(
        label="Machines", queryset=Machine.objects.none(), required=False, widget=forms.CheckboxSelectMultiple,
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["processes"].choices = [
            (name, name.replace('_', ' ')) for name in Process.objects.order_by('name').values_list('name', flat=True)
        ]
        self.fields["machines"].queryset = Machine.objects.order_by('name')

    def to_descriptor(self) -> dict:
        """Shape the cleaned row the way the submission service expects it."""
        data = self.cleaned_data
        machine_id = [machine.ref for machine in data.get("machines") or []]
        return {
            "sub_job_id": data["sub_job_id"].strip(),
            "color": data.get("color") or "",
            "card_size": data.get("card_size") or "",
            "card_quantity": data.get("card_quantity"),
            "item_quantity": data.get("item_quantity"),
            "description": data.get("description") or "",
            "processes": {name: True for name in data.get("processes") or []},
            "machine_id": machine_id,
        }


class BaseSubJobFormSet(BaseFormSet):
    def clean(self):
        super().clean()
        if any(self.errors):
            return
        seen = set()
        filled = 0
        for form in self.forms:
            if not form.has_changed() or form.cleaned_data.get("DELETE"):
                continue
            filled += 1
            sub_job_id = form.cleaned_data["sub_job_id"].strip()
            if sub_job_id in seen:
                raise forms.ValidationError(f"Sub job ID {sub_job_id} is used twice.")
            seen.add(sub_job_id)
        if not filled:
            raise forms.ValidationError("Add at least one sub job.")

    def descriptors(self) -> list[dict]:
        return [
            form.to_descriptor()
            for form in self.forms
            if form.has_changed() and not form.cleaned_data.get("DELETE")
        ]


SubJobFormSet = formset_factory(SubJobForm, formset=BaseSubJobFormSet, extra=1, can_delete=True)
