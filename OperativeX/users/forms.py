# PATH: /OperativeX/users/forms.py
from django import forms
from django.contrib.auth.forms import AuthenticationForm

from .models import ROLE_VOCABULARY

# ===== Tailwind styling =====
INPUT_CLS = "block w-full rounded-md border border-gray-300 p-2.5 text-sm focus:outline-none focus:ring-2 focus:ring-purple-500"
SELECT_CLS = "block w-full rounded-md border border-gray-300 p-2.5 text-sm bg-white focus:outline-none focus:ring-2 focus:ring-purple-500"
TEXTAREA_CLS = "block w-full rounded-md border border-gray-300 p-2.5 text-sm min-h-24 focus:outline-none focus:ring-2 focus:ring-purple-500"
CHECK_CLS = "h-4 w-4 text-purple-600 rounded border-gray-300"

MIN_PASSWORD_LENGTH = 6


class TailwindFormMixin:
    """Apply the shared Tailwind classes and flag fields that failed validation."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        for name, field in self.fields.items():
            w = field.widget

            if isinstance(w, (forms.CheckboxInput, forms.CheckboxSelectMultiple)):
                base = CHECK_CLS
            elif isinstance(w, forms.Textarea):
                base = TEXTAREA_CLS
            elif isinstance(w, forms.Select):
                base = SELECT_CLS
            else:
                base = INPUT_CLS

            prev = w.attrs.get("class", "")
            w.attrs["class"] = (prev + " " + base).strip()
            w.attrs.setdefault("aria-label", field.label or name)

            # If the form is bound and this field contains an error, append error styling.
            if self.is_bound and name in self.errors:
                w.attrs["class"] += " ring-1 ring-red-500 focus:ring-red-300"
                w.attrs["aria-invalid"] = "true"


class LoginAuthenticationForm(TailwindFormMixin, AuthenticationForm):
    """Sign in with the employee code and password."""

    error_messages = {
        'invalid_login': "Invalid employee code or password.",
        'inactive': "This account is inactive.",
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if 'username' in self.fields:
            self.fields['username'].label = 'Employee Code'
            self.fields['username'].widget.attrs.setdefault('placeholder', 'e.g. E007')
        if 'password' in self.fields:
            self.fields['password'].label = 'Password'


class WorkerForm(TailwindFormMixin, forms.Form):
    """Create or update a worker profile.

    Field-level ``required`` is disabled so that ``clean`` can report the
    same combined messages the admin panel shows.  Pass ``is_create=True``
    when a password is mandatory.
    """

    full_name = forms.CharField(label="Full Name", max_length=150, required=False)
    employee_code = forms.CharField(label="Employee Code", max_length=50, required=False)
    roles = forms.MultipleChoiceField(
        label="Roles", choices=ROLE_VOCABULARY, required=False,
        widget=forms.CheckboxSelectMultiple,
        error_messages={"invalid_choice": "Unknown role: %(value)s"},
    )
    password = forms.CharField(label="Password", required=False, widget=forms.PasswordInput)

    def __init__(self, *args, is_create=True, **kwargs):
        self.is_create = is_create
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        full_name = (cleaned.get("full_name") or "").strip()
        code = (cleaned.get("employee_code") or "").strip()
        password = cleaned.get("password") or ""
        cleaned["full_name"], cleaned["employee_code"] = full_name, code

        if self.is_create:
            if not full_name or not code or not password:
                raise forms.ValidationError("All fields are required")
        elif not full_name or not code:
            raise forms.ValidationError("Name and Employee Code are required")

        if password and len(password) < MIN_PASSWORD_LENGTH:
            self.add_error("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if "roles" not in self.errors and not cleaned.get("roles"):
            self.add_error("roles", "At least one role must be selected")
        return cleaned

    def first_error(self) -> str:
        """Single message for JSON callers: non-field errors first."""
        for message in self.non_field_errors():
            return message
        for errors in self.errors.values():
            for message in errors:
                return message
        return "Invalid data"
