from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from sparkbooks.cli.prompts import optional
from sparkbooks.constants import JOB_STATUS_LABELS
from sparkbooks.errors import SparkbooksError
from sparkbooks.models.customer import Customer
from sparkbooks.services.customer_service import CustomerService
from sparkbooks.services.job_service import JobService

console = Console()

CUSTOMER_FIELDS = [
    ("email", "Email"),
    ("phone", "Phone"),
    ("address", "Address"),
    ("city", "City"),
    ("state", "State"),
    ("zip", "ZIP"),
    ("notes", "Notes"),
]


def customers_menu(customer_service: CustomerService, job_service: JobService) -> None:
    while True:
        choice = questionary.select(
            "Customers:",
            choices=["List Customers", "Search Customers", "New Customer", "Back"],
        ).ask()

        if choice is None or choice == "Back":
            break
        elif choice == "List Customers":
            _pick_customer(customer_service.list_customers(), customer_service, job_service)
        elif choice == "Search Customers":
            query = questionary.text("Name, email or phone contains:").ask()
            if query is None:
                continue
            _pick_customer(customer_service.search_customers(query), customer_service, job_service)
        elif choice == "New Customer":
            create_customer_menu(customer_service)


def create_customer_menu(customer_service: CustomerService) -> Customer | None:
    console.print()
    console.print("[bold]New Customer[/bold]", style="cyan")

    name = questionary.text("Name:").ask()
    if not name:
        console.print("[yellow]Cancelled.[/yellow]")
        return None

    data: dict[str, str | None] = {"name": name}
    for field, label in CUSTOMER_FIELDS:
        data[field] = optional(questionary.text(f"{label} (optional):").ask())

    try:
        customer = customer_service.create_customer(data)
    except SparkbooksError as exc:
        console.print(f"[red]{exc}[/red]")
        return None

    console.print(f"[green bold]Customer '{customer.name}' created.[/green bold]")
    return customer


def _customer_table(customers: list[Customer]) -> Table:
    table = Table(title="Customers")
    table.add_column("#", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("City")
    for c in customers:
        table.add_row(str(c.id), c.name, c.email or "", c.phone or "", c.city or "")
    return table


def _pick_customer(customers: list[Customer], customer_service: CustomerService, job_service: JobService) -> None:
    if not customers:
        console.print("[yellow]No customers found.[/yellow]")
        return

    console.print()
    console.print(_customer_table(customers))
    console.print()

    by_label = {f"{c.id} - {c.name}": c for c in customers}
    choice = questionary.select("Select a customer:", choices=list(by_label.keys()) + ["Back"]).ask()
    if choice is None or choice == "Back":
        return

    _customer_detail_menu(by_label[choice], customer_service, job_service)


def _customer_detail_menu(customer: Customer, customer_service: CustomerService, job_service: JobService) -> None:
    while True:
        console.print()
        console.print(f"[bold cyan]{customer.name}[/bold cyan]")
        for field, label in CUSTOMER_FIELDS:
            value = getattr(customer, field)
            if value:
                console.print(f"  {label}: {value}")

        choice = questionary.select(
            "Actions:",
            choices=["View Jobs", "Edit Customer", "Delete Customer", "Back"],
        ).ask()

        if choice is None or choice == "Back":
            break
        elif choice == "View Jobs":
            jobs = job_service.list_jobs_for_customer(customer.id)
            if not jobs:
                console.print("[yellow]No jobs for this customer.[/yellow]")
                continue
            table = Table(title=f"Jobs for {customer.name}")
            table.add_column("#", style="dim")
            table.add_column("Title", style="bold")
            table.add_column("Status", justify="center")
            table.add_column("Scheduled")
            for job in jobs:
                table.add_row(
                    str(job.id),
                    job.title,
                    JOB_STATUS_LABELS.get(job.status.value, job.status.value),
                    job.scheduled_date.isoformat() if job.scheduled_date else "",
                )
            console.print(table)
        elif choice == "Edit Customer":
            customer = _edit_customer(customer, customer_service)
        elif choice == "Delete Customer":
            confirm = questionary.confirm(f"Delete '{customer.name}'?", default=False).ask()
            if confirm:
                customer_service.delete_customer(customer.id)
                console.print("[green]Customer deleted.[/green]")
                break


def _edit_customer(customer: Customer, customer_service: CustomerService) -> Customer:
    name = questionary.text("Name:", default=customer.name).ask()
    if name is None:
        return customer

    data: dict[str, str | None] = {"name": name}
    for field, label in CUSTOMER_FIELDS:
        answer = questionary.text(f"{label}:", default=getattr(customer, field) or "").ask()
        if answer is None:
            return customer
        data[field] = optional(answer)

    try:
        customer = customer_service.update_customer(customer.id, data)
    except SparkbooksError as exc:
        console.print(f"[red]{exc}[/red]")
        return customer

    console.print("[green]Customer updated.[/green]")
    return customer
