from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from sparkbooks.cli.prompts import ask_date, ask_money, optional
from sparkbooks.constants import JOB_STATUS_LABELS
from sparkbooks.errors import SparkbooksError
from sparkbooks.models import format_money, format_quantity
from sparkbooks.models.job import Job, JobItem, JobStatus
from sparkbooks.services.customer_service import CustomerService
from sparkbooks.services.document_service import DocumentService
from sparkbooks.services.estimate_service import EstimateService
from sparkbooks.services.invoice_service import InvoiceService
from sparkbooks.services.job_service import JobService
from sparkbooks.services.totals import compute_subtotal
from sparkbooks.settings import settings

console = Console()


def jobs_menu(
    job_service: JobService,
    customer_service: CustomerService,
    estimate_service: EstimateService,
    invoice_service: InvoiceService,
) -> None:
    while True:
        choice = questionary.select("Jobs:", choices=["List Jobs", "New Job", "Back"]).ask()

        if choice is None or choice == "Back":
            break
        elif choice == "List Jobs":
            job = _pick_job(job_service.list_jobs())
            if job is not None:
                _job_detail_menu(job, job_service, estimate_service, invoice_service)
        elif choice == "New Job":
            job = create_job_menu(job_service, customer_service)
            if job is not None:
                _job_detail_menu(job, job_service, estimate_service, invoice_service)


def create_job_menu(job_service: JobService, customer_service: CustomerService) -> Job | None:
    console.print()
    console.print("[bold]New Job[/bold]", style="cyan")

    customers = customer_service.list_customers()
    if not customers:
        console.print("[yellow]Add a customer first.[/yellow]")
        return None

    by_label = {f"{c.id} - {c.name}": c for c in customers}
    choice = questionary.select("Customer:", choices=list(by_label.keys()) + ["Cancel"]).ask()
    if choice is None or choice == "Cancel":
        return None

    title = questionary.text("Title:").ask()
    if not title:
        console.print("[yellow]Cancelled.[/yellow]")
        return None

    description = optional(questionary.text("Description (optional):").ask())
    location = optional(questionary.text("Location (optional):").ask())
    scheduled = ask_date("Scheduled date (YYYY-MM-DD, optional):")

    try:
        job = job_service.create_job(
            {
                "customer_id": by_label[choice].id,
                "title": title,
                "description": description,
                "location": location,
                "scheduled_date": scheduled,
            }
        )
    except SparkbooksError as exc:
        console.print(f"[red]{exc}[/red]")
        return None

    console.print(f"[green bold]Job '{job.title}' created.[/green bold]")
    return job


def _pick_job(jobs: list[Job]) -> Job | None:
    if not jobs:
        console.print("[yellow]No jobs yet.[/yellow]")
        return None

    table = Table(title="Jobs")
    table.add_column("#", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Location")
    for job in jobs:
        table.add_row(
            str(job.id),
            job.title,
            JOB_STATUS_LABELS.get(job.status.value, job.status.value),
            job.location or "",
        )
    console.print()
    console.print(table)
    console.print()

    by_label = {f"{j.id} - {j.title}": j for j in jobs}
    choice = questionary.select("Select a job:", choices=list(by_label.keys()) + ["Back"]).ask()
    if choice is None or choice == "Back":
        return None
    return by_label[choice]


def _show_items(items: list[JobItem]) -> None:
    table = Table(title="Line Items")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit Price", justify="right")
    table.add_column("Total", justify="right")
    for item in items:
        table.add_row(
            item.description,
            format_quantity(item.quantity),
            format_money(item.unit_price),
            format_money(item.total_price),
        )
    console.print(table)
    console.print(f"  [bold]Subtotal: {format_money(compute_subtotal(items))}[/bold]")


def _job_detail_menu(
    job: Job,
    job_service: JobService,
    estimate_service: EstimateService,
    invoice_service: InvoiceService,
) -> None:
    while True:
        items = job_service.get_job_items(job.id)
        console.print()
        console.print(f"[bold cyan]Job: {job.title}[/bold cyan] ({JOB_STATUS_LABELS[job.status.value]})")
        if job.description:
            console.print(f"  {job.description}")
        _show_items(items)

        choice = questionary.select(
            "Actions:",
            choices=[
                "Add Item",
                "Edit Item",
                "Remove Item",
                "Change Status",
                "Create Estimate",
                "Create Invoice",
                "Delete Job",
                "Back",
            ],
        ).ask()

        try:
            if choice is None or choice == "Back":
                break
            elif choice == "Add Item":
                _add_item(job, job_service)
            elif choice == "Edit Item":
                _edit_item(items, job_service)
            elif choice == "Remove Item":
                _remove_item(items, job_service)
            elif choice == "Change Status":
                job = _change_status(job, job_service)
            elif choice == "Create Estimate":
                _create_document(job, estimate_service)
            elif choice == "Create Invoice":
                _create_document(job, invoice_service)
            elif choice == "Delete Job":
                confirm = questionary.confirm(
                    f"Delete '{job.title}' and its items? Estimates and invoices are kept.", default=False
                ).ask()
                if confirm:
                    job_service.delete_job(job.id)
                    console.print("[green]Job deleted.[/green]")
                    break
        except SparkbooksError as exc:
            console.print(f"[red]{exc}[/red]")


def _add_item(job: Job, job_service: JobService) -> None:
    desc = questionary.text("  Description:").ask()
    if not desc:
        console.print("[yellow]Cancelled.[/yellow]")
        return
    quantity = ask_money("  Quantity:", default="1", allow_zero=False)
    if quantity is None:
        return
    unit_price = ask_money("  Unit price (e.g. 85.50):")
    if unit_price is None:
        return
    item = job_service.add_job_item(
        {"job_id": job.id, "description": desc, "quantity": quantity, "unit_price": unit_price}
    )
    console.print(f"  [green]Added '{item.description}' ({format_money(item.total_price)}).[/green]")


def _select_item(items: list[JobItem], message: str) -> JobItem | None:
    if not items:
        console.print("[yellow]No items.[/yellow]")
        return None
    choices = [f"{i.id} - {i.description} ({format_money(i.total_price)})" for i in items] + ["Back"]
    choice = questionary.select(message, choices=choices).ask()
    if choice is None or choice == "Back":
        return None
    return items[choices.index(choice)]


def _edit_item(items: list[JobItem], job_service: JobService) -> None:
    item = _select_item(items, "Select the item:")
    if item is None:
        return
    desc = questionary.text("  Description:", default=item.description).ask()
    if desc is None:
        return
    quantity = ask_money("  Quantity:", default=format_quantity(item.quantity), allow_zero=False)
    if quantity is None:
        return
    unit_price = ask_money("  Unit price:", default=f"{item.unit_price:.2f}")
    if unit_price is None:
        return
    updated = job_service.update_job_item(
        item.id, {"description": desc, "quantity": quantity, "unit_price": unit_price}
    )
    console.print(f"  [green]Item '{updated.description}' updated.[/green]")


def _remove_item(items: list[JobItem], job_service: JobService) -> None:
    item = _select_item(items, "Select the item to remove:")
    if item is None:
        return
    if questionary.confirm(f"Remove '{item.description}'?", default=False).ask():
        job_service.delete_job_item(item.id)
        console.print(f"  [green]Item '{item.description}' removed.[/green]")


def _change_status(job: Job, job_service: JobService) -> Job:
    labels = {label: status for status, label in JOB_STATUS_LABELS.items()}
    choice = questionary.select(
        "New status:", choices=list(labels.keys()), default=JOB_STATUS_LABELS[job.status.value]
    ).ask()
    if choice is None:
        return job
    job = job_service.update_job_status(job.id, JobStatus(labels[choice]))
    console.print(f"[green]Job marked as {choice}.[/green]")
    return job


def _create_document(job: Job, service: DocumentService) -> None:
    tax_rate = ask_money("  Tax rate (%):", default=f"{settings.default_tax_rate}")
    if tax_rate is None:
        return
    notes = optional(questionary.text("  Notes (optional):").ask())
    document = service.create_from_job(job.id, tax_rate=tax_rate, notes=notes)
    console.print(
        f"[green bold]{service.label.capitalize()} {getattr(document, service.number_field)} created: "
        f"{format_money(document.total_amount)}[/green bold]"
    )
