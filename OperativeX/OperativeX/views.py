# PATH: /OperativeX/OperativeX/views.py
from django.contrib.auth.decorators import login_required
from django.shortcuts import render

PLANT_NAME = "Zafar Habib Packages (Pvt.) Ltd."


@login_required
def home_view(request):
    """Landing page shown to every signed-in identity after login."""
    return render(request, "home.html", {"plant_name": PLANT_NAME})
