# PATH: /OperativeX/machines/views.py
import logging

from django.contrib import messages
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from OperativeX.navigation import page_required
from .forms import MachineForm
from .models import Machine

logger = logging.getLogger(__name__)


@page_required('machineinfo')
def machine_list_view(request):
    """Machine information page: list ordered by name with an add form."""
    if request.method == 'POST':
        form = MachineForm(request.POST)
        if form.is_valid():
            machine = form.save()
            logger.info("Machine %s added by %s", machine.name, request.profile.employee_code)
            messages.success(request, "Machine added successfully!")
            return redirect('machines:machine_list')
    else:
        form = MachineForm()
    return render(request, 'machines/machine_list.html', {
        'machines': Machine.objects.order_by('name'),
        'form': form,
    })


@page_required('machineinfo')
def machine_edit_view(request, pk):
    machine = get_object_or_404(Machine, pk=pk)
    if request.method == 'POST':
        form = MachineForm(request.POST, instance=machine)
        if form.is_valid():
            form.save()
            messages.success(request, "Machine updated successfully!")
            return redirect('machines:machine_list')
    else:
        form = MachineForm(instance=machine)
    return render(request, 'machines/machine_form.html', {'form': form, 'machine': machine})


@page_required('machineinfo')
@require_POST
def machine_delete_view(request, pk):
    machine = get_object_or_404(Machine, pk=pk)
    name = machine.name
    machine.delete()
    logger.info("Machine %s deleted by %s", name, request.profile.employee_code)
    messages.success(request, "Machine deleted successfully!")
    return redirect('machines:machine_list')
