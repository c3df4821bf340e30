from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session, joinedload

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.asset_transfer import AssetTransfer
from uam.auth.jwt import get_current_user
from uam.services.movement_history import movements_query, movement_kind_from_notes
from uam.services.pdf_renderer import PdfRendererClient, PdfRenderError, get_pdf_renderer, render_html

router = APIRouter()


@router.get("/{transfer_id}/pdf")
async def get_transfer_pdf(
    transfer_id: int,
    db: Session = Depends(get_db),
    renderer: PdfRendererClient = Depends(get_pdf_renderer),
    current_user: User = Depends(get_current_user)
):
    """Printable receipt of one movement, with signature fields."""
    transfer = movements_query(db).options(
        joinedload(AssetTransfer.asset).joinedload(Asset.supplier_company)
    ).filter(AssetTransfer.id == transfer_id).first()
    if not transfer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Movement not found"
        )

    kind = movement_kind_from_notes(transfer.notes)
    html = render_html(
        "transfer_receipt.html",
        transfer=transfer,
        asset=transfer.asset,
        movement_kind=kind.label if kind else None,
    )
    try:
        pdf = renderer.render(html)
    except PdfRenderError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=movement_{transfer_id}.pdf"}
    )
