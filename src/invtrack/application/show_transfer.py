"""Application service: Show Transfer use case (query)."""

from __future__ import annotations

from invtrack.application.dto import TransferDTO, transfer_to_dto
from invtrack.application.lookup import load_transfer
from invtrack.domain.repository.transfer_repository import TransferRepository


class ShowTransferHandler:

    def __init__(self, transfer_repo: TransferRepository) -> None:
        self._transfer_repo = transfer_repo

    def handle(self, transfer_key: str) -> TransferDTO:
        return transfer_to_dto(load_transfer(self._transfer_repo, transfer_key))

    def list_all(self) -> list[TransferDTO]:
        transfers = sorted(self._transfer_repo.list_all(), key=lambda t: t.transfer_number)
        return [transfer_to_dto(t) for t in transfers]
