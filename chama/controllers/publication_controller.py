# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: news feed, approved reports, officer signatures."""
from typing import Dict, List

from fastapi import APIRouter, Depends

from chama.core.dependencies import current_principal, get_publication_service, require
from chama.schemas import NewsCreate, NewsOut, Principal, ReportCreate, ReportOut, SignatureUpdate
from chama.services.publication_service import PublicationService

router = APIRouter(tags=["Publications"])


@router.get("/news", response_model=List[NewsOut])
def list_news(publications: PublicationService = Depends(get_publication_service)):
    return publications.list_news()


@router.post("/news", status_code=201, response_model=NewsOut)
def post_news(body: NewsCreate,
              principal: Principal = Depends(require("news:publish")),
              publications: PublicationService = Depends(get_publication_service)):
    return publications.publish_news(body.text, signed_by=principal.name)


@router.get("/approved-reports", response_model=List[ReportOut])
def list_reports(publications: PublicationService = Depends(get_publication_service)):
    return publications.list_reports()


@router.post("/approved-reports", status_code=201, response_model=ReportOut)
def post_report(body: ReportCreate,
                principal: Principal = Depends(require("reports:publish")),
                publications: PublicationService = Depends(get_publication_service)):
    return publications.publish_report(body.text, body.file, signed_by=principal.name)


@router.get("/signatures", response_model=Dict[str, str])
def get_signatures(publications: PublicationService = Depends(get_publication_service)):
    return publications.signatures()


@router.patch("/signatures/{role}")
def set_signature(role: str, body: SignatureUpdate,
                  principal: Principal = Depends(current_principal),
                  publications: PublicationService = Depends(get_publication_service)):
    """Officers keep their own signature; the chairperson may set any."""
    return publications.set_signature(principal, role.lower(), body.signature)
