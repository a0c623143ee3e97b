from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from sparkbooks.cli.prompts import ask_date, ask_money, optional
from sparkbooks.constants import ESTIMATE_STATUS_LABELS, INVOICE_STATUS_LABELS
from sparkbooks.errors import SparkbooksError
from sparkbooks.models import format_money
from sparkbooks.models.document import BusinessDocument
from sparkbooks.services.document_service import DocumentService
from sparkbooks.services.estimate_service import EstimateService
from sparkbooks.services.invoice_service import InvoiceService

console = Console()

CONVERT_ACTION = "Convert to Invoice"
ALL_INVOICES = "All Invoices"
OVERDUE_INVOICES = "Overdue Invoices"


def estimates_menu(estimate_service: EstimateService) -> None:
    _documents_menu(estimate_service, ESTIMATE_STATUS_LABELS, extra_actions=[CONVERT_ACTION])


def invoices_menu(invoice_service: InvoiceService) -> None:
    choice = questionary.select("Show:", choices=[ALL_INVOICES, OVERDUE_INVOICES, "Back"]).ask()
    if choice is None or choice == "Back":
        return

    if choice == OVERDUE_INVOICES:
        overdue = invoice_service.list_overdue()
        if not overdue:
            console.print("[green]No overdue invoices.[/green]")
            return
        _documents_menu(invoice_service, INVOICE_STATUS_LABELS, documents=overdue)
    else:
        _documents_menu(invoice_service, INVOICE_STATUS_LABELS)


def _number(document: BusinessDocument, service: DocumentService) -> str:
    return getattr(document, service.number_field)


def _status_text(document: BusinessDocument, status_labels: dict[str, str]) -> str:
    label = status_labels.get(document.status.value, document.status.value)
    if getattr(document, "is_overdue", False):
        flag = "overdue"
    elif getattr(document, "is_expired", False):
        flag = "expired"
    else:
        return label
    if flag == document.status.value:
        return label
    return f"{label} [red]({flag})[/red]"


def _documents_menu(
    service: DocumentService,
    status_labels: dict[str, str],
    extra_actions: list[str] | None = None,
    documents: list[BusinessDocument] | None = None,
) -> None:
    if documents is None:
        documents = service.list_documents()
    title = f"{service.label.capitalize()}s"

    if not documents:
        console.print(f"[yellow]No {service.label}s yet.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Number", style="bold")
    table.add_column("Issued")
    table.add_column(service.date_field.replace("_", " ").capitalize())
    table.add_column("Status", justify="center")
    table.add_column("Total", justify="right")
    for doc in documents:
        table.add_row(
            _number(doc, service),
            doc.issue_date.isoformat(),
            getattr(doc, service.date_field).isoformat(),
            _status_text(doc, status_labels),
            format_money(doc.total_amount),
        )
    console.print()
    console.print(table)
    console.print()

    by_label = {_number(d, service): d for d in documents}
    choice = questionary.select(f"Select an {service.label}:", choices=list(by_label.keys()) + ["Back"]).ask()
    if choice is None or choice == "Back":
        return

    _document_detail_menu(by_label[choice], service, status_labels, extra_actions or [])


def _show_document(document: BusinessDocument, service: DocumentService, status_labels: dict[str, str]) -> None:
    console.print()
    console.print(f"[bold cyan]{service.label.capitalize()} {_number(document, service)}[/bold cyan]")
    console.print(f"  Status: {_status_text(document, status_labels)}")
    console.print(f"  Issued: {document.issue_date.isoformat()}")
    console.print(f"  {service.date_field.replace('_', ' ').capitalize()}: {getattr(document, service.date_field)}")
    console.print(f"  Subtotal: {format_money(document.subtotal)}")
    console.print(f"  Tax ({document.tax_rate}%): {format_money(document.tax_amount)}")
    console.print(f"  [bold]Total: {format_money(document.total_amount)}[/bold]")
    if document.notes:
        console.print(f"  Notes: {document.notes}")


def _document_detail_menu(
    document: BusinessDocument,
    service: DocumentService,
    status_labels: dict[str, str],
    extra_actions: list[str],
) -> None:
    while True:
        _show_document(document, service, status_labels)

        choice = questionary.select(
            "Actions:",
            choices=["Change Status", "Edit Amounts", "Edit Notes", *extra_actions, "Delete", "Back"],
        ).ask()

        try:
            if choice is None or choice == "Back":
                break
            elif choice == "Change Status":
                document = _change_status(document, service, status_labels)
            elif choice == "Edit Amounts":
                document = _edit_amounts(document, service)
            elif choice == "Edit Notes":
                notes = questionary.text("  Notes:", default=document.notes or "").ask()
                if notes is not None:
                    document = service.update_document(document.id, {"notes": optional(notes)})
                    console.print("[green]Notes updated.[/green]")
            elif choice == CONVERT_ACTION and isinstance(service, EstimateService):
                document = _convert(document, service)
            elif choice == "Delete":
                confirm = questionary.confirm(f"Delete {_number(document, service)}?", default=False).ask()
                if confirm:
                    service.delete_document(document.id)
                    console.print(f"[green]{service.label.capitalize()} deleted.[/green]")
                    break
        except SparkbooksError as exc:
            console.print(f"[red]{exc}[/red]")


def _change_status(document: BusinessDocument, service: DocumentService, status_labels: dict[str, str]):
    labels = {label: status for status, label in status_labels.items()}
    choice = questionary.select(
        "New status:", choices=list(labels.keys()), default=status_labels[document.status.value]
    ).ask()
    if choice is None:
        return document
    document = service.update_status(document.id, labels[choice])
    console.print(f"[green]Marked as {choice}.[/green]")
    return document


def _edit_amounts(document: BusinessDocument, service: DocumentService):
    subtotal = ask_money("  Subtotal:", default=f"{document.subtotal:.2f}")
    if subtotal is None:
        return document
    tax_rate = ask_money("  Tax rate (%):", default=f"{document.tax_rate}")
    if tax_rate is None:
        return document
    # Both values go together so tax and total are recalculated.
    document = service.update_document(document.id, {"subtotal": subtotal, "tax_rate": tax_rate})
    console.print(f"[green]Total is now {format_money(document.total_amount)}.[/green]")
    return document


def _convert(estimate, estimate_service: EstimateService):
    due_date = ask_date("  Invoice due date (YYYY-MM-DD, empty for default):")
    confirm = questionary.confirm(
        f"Create an invoice from {estimate.estimate_number} and mark it accepted?", default=True
    ).ask()
    if not confirm:
        return estimate
    invoice_id = estimate_service.convert_to_invoice(estimate.id, due_date=due_date)
    console.print(f"[green bold]Invoice created (id={invoice_id}).[/green bold]")
    return estimate_service.require_document(estimate.id)
