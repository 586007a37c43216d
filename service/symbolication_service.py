# service/symbolication_service.py
import logging
from pydantic import ValidationError
from core.symbolication import extract_bundle_reference, first_bundle_url, symbolicate
from model.api import SymbolicateEnvelope
from service.bundle_service import BundleService
from util.enums import ErrorMessage
from util.errors import MalformedReferenceError, MissingBundleReferenceError

logger = logging.getLogger(__name__)


class SymbolicationService:
    def __init__(self, bundles: BundleService) -> None:
        self._bundles = bundles

    async def symbolicate_request(self, body: str) -> SymbolicateEnvelope:
        """
        Parse a {"stack": [...]} body, find the bundle the first http(s)
        frame was served from, and map the whole stack through its source map.
        """
        try:
            envelope = SymbolicateEnvelope.model_validate_json(body)
        except ValidationError as e:
            raise MalformedReferenceError.of(
                ErrorMessage.MALFORMED_STACK, f"{e.error_count()} validation error(s)"
            )

        bundle_url = first_bundle_url(envelope.stack)
        if bundle_url is None:
            raise MissingBundleReferenceError.of(ErrorMessage.MISSING_BUNDLE_REFERENCE)

        ref = extract_bundle_reference(bundle_url)
        bundle = self._bundles.resolve_bundle(ref.store_id, ref.bundle_id, ref.platform)
        source_map = await self._bundles.read_source_map(bundle)

        frames = symbolicate(envelope.stack, source_map)
        logger.info(
            "symbolicate.ok store=%s bundle=%s frames=%d",
            ref.store_id,
            bundle.id,
            len(frames),
        )
        return SymbolicateEnvelope(stack=frames)
