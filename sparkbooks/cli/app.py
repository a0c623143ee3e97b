import questionary
from rich.console import Console

from sparkbooks.cli.customer_menu import customers_menu
from sparkbooks.cli.document_menu import estimates_menu, invoices_menu
from sparkbooks.cli.job_menu import jobs_menu
from sparkbooks.repositories.factory import (
    get_customer_repository,
    get_estimate_repository,
    get_invoice_repository,
    get_job_repository,
)
from sparkbooks.services.customer_service import CustomerService
from sparkbooks.services.estimate_service import EstimateService
from sparkbooks.services.invoice_service import InvoiceService
from sparkbooks.services.job_service import JobService

console = Console()


def _build_services() -> tuple[CustomerService, JobService, EstimateService, InvoiceService]:
    customer_repo = get_customer_repository()
    job_repo = get_job_repository()
    estimate_repo = get_estimate_repository()
    invoice_repo = get_invoice_repository()
    return (
        CustomerService(customer_repo),
        JobService(job_repo, customer_repo),
        EstimateService(estimate_repo, job_repo, invoice_repo),
        InvoiceService(invoice_repo, job_repo),
    )


def main_menu() -> None:
    customer_service, job_service, estimate_service, invoice_service = _build_services()

    console.print()
    console.print("[bold]Sparkbooks[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "Customers",
                "Jobs",
                "Estimates",
                "Invoices",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "Customers":
            customers_menu(customer_service, job_service)
        elif choice == "Jobs":
            jobs_menu(job_service, customer_service, estimate_service, invoice_service)
        elif choice == "Estimates":
            estimates_menu(estimate_service)
        elif choice == "Invoices":
            invoices_menu(invoice_service)
