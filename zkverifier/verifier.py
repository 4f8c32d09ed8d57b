"""
Proof Verifier
==============

[VERIFY] Checks a ZK proof in three phases:

1. Structure - proof present, signal count matches the proof type,
   nullifier present. Aborts with StructuralError.
2. Public signals - every configured option is checked against its signal,
   root signals go through the root verifiers. All failing fields are
   collected into one ValidationErrors.
3. Groth16 - only when phase 2 is clean. Failure is ProofInvalidError.

A root that could not be checked (RootVerificationError) aborts phase 2 and
propagates unchanged: it says nothing about the proof.

[USAGE]
    verifier = Verifier(
        vk_bytes,
        with_age_above(18),
        with_citizenships("UKR", "GEO"),
        with_passport_root_verifier(root_verifier),
    )
    verifier.verify_proof(proof)
    verifier.verify_proof(proof, with_event_id("304358862882731539112827930982999386691702727710421481944329166126417129570"))
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from .encoding import decode_text, is_empty_zk_date, parse_decimal
from .errors import (
    ConfigurationError,
    Groth16Error,
    InvalidRootError,
    ProofInvalidError,
    RuleError,
    StructuralError,
    ValidationErrors,
    VerificationKeyRequiredError,
)
from .groth16 import Groth16Checker, VerificationKeySource, load_verification_key, verify_groth16
from .options import VerifyOption, VerifyOptions, merge_options
from .proof import ZKProof
from .root import RootVerifier
from .rules import (
    REQUIRED,
    SKIPPED,
    MaxRule,
    Outcome,
    after_date,
    before_date,
    equal_date,
    errors_only,
    is_in,
    is_unset,
    or_error,
    start_of_day,
    validate,
    validate_on_opt_set,
    years_ago,
)
from .signals import ProofType, SignalGetter, SignalID, signals_count

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Verifier:
    """
    Validates public signals against the configured policy and verifies the
    Groth16 proof.

    Instances are immutable after construction and safe to share between
    threads. Concurrency of root checks is handled by the root verifiers.
    """

    def __init__(
        self,
        verification_key: Optional[bytes],
        *options: VerifyOption,
        checker: Groth16Checker = verify_groth16,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            verification_key: snarkjs verification key JSON, may be None when
                with_verification_key_file() is given
            options: Policy applied to every verification
            checker: Groth16 primitive, (proof, key) -> None or raises
            clock: Source of the current UTC time

        Raises:
            VerificationKeyRequiredError: no key and no key file
            ConfigurationError: key file cannot be read, or the key does not
                parse for the default Groth16 checker
        """
        self.options = merge_options(True, VerifyOptions(), *options)
        self._checker = checker
        self._clock = clock

        key_file = self.options.verification_key_file
        if key_file:
            try:
                verification_key = Path(key_file).read_bytes()
            except OSError as e:
                raise ConfigurationError(
                    f"failed to read verification key from file {key_file!r}: {e}"
                ) from e
            logger.info(f"[VERIFY] Loaded verification key from {key_file}")
        elif not verification_key:
            raise VerificationKeyRequiredError()

        self.verification_key: bytes = bytes(verification_key)

        # parsed once here, custom checkers receive the raw bytes
        self._checker_key: VerificationKeySource = self.verification_key
        if checker is verify_groth16:
            try:
                self._checker_key = load_verification_key(self.verification_key)
            except Groth16Error as e:
                raise ConfigurationError(str(e)) from e

        logger.info(f"[VERIFY] Verifier ready: proof_type={self.options.proof_type.value}")

    def verify_proof(self, proof: ZKProof, *options: VerifyOption) -> None:
        """
        Verify proof and check public signals.

        Args:
            proof: Proof with public signals
            options: Call-time overrides, layered on top of stored options

        Raises:
            StructuralError: malformed proof or signal count
            ValidationErrors: one or more public signals failed their rules
            RootVerificationError: a root could not be checked
            ProofInvalidError: Groth16 verification failed
        """
        opts = merge_options(False, self.options, *options)

        self._validate_pub_signals(proof, opts)

        try:
            self._checker(proof, self._checker_key)
        except Exception as e:
            logger.debug(f"[VERIFY] Groth16 check failed: {e}")
            raise ProofInvalidError(f"groth16 verification failed: {e}") from e

        logger.debug(f"[VERIFY] Proof verified: proof_type={opts.proof_type.value}")

    async def verify_proof_async(self, proof: ZKProof, *options: VerifyOption) -> None:
        """verify_proof() in a worker thread, root calls and pairing block."""
        await asyncio.to_thread(self.verify_proof, proof, *options)

    # ========================================================================
    # Public signals
    # ========================================================================

    def _validate_pub_signals(self, proof: ZKProof, opts: VerifyOptions) -> None:
        signals = SignalGetter(opts.proof_type, proof.pub_signals)
        count = signals_count(opts.proof_type)

        structural = {
            "zk_proof/proof": validate(
                None if proof.proof is None or proof.proof.is_empty() else proof.proof,
                REQUIRED,
            ),
            "zk_proof/pub_signals": _validate_length(proof.pub_signals, count),
            SignalID.NULLIFIER.field: validate(signals.get(SignalID.NULLIFIER), REQUIRED),
        }
        failed = errors_only(structural)
        if failed:
            logger.debug(f"[VERIFY] Structural check failed: {sorted(failed)}")
            raise StructuralError(failed)

        if opts.proof_type is ProofType.POLL_PARTICIPATION:
            errors = self._validate_poll_signals(signals, opts)
        else:
            errors = self._validate_passport_signals(signals, opts)

        if errors:
            logger.debug(f"[VERIFY] Public signals rejected: {sorted(errors)}")
            raise ValidationErrors(errors)

    def _validate_poll_signals(self, signals: SignalGetter, opts: VerifyOptions) -> Dict[str, Exception]:
        outcomes: Dict[str, Outcome] = {
            SignalID.NULLIFIERS_TREE_ROOT.field: _verify_root(
                opts.poll_root_verifier, signals.get(SignalID.NULLIFIERS_TREE_ROOT)
            ),
            SignalID.PARTICIPATION_EVENT_ID.field: validate_on_opt_set(
                signals.get(SignalID.PARTICIPATION_EVENT_ID),
                opts.participation_event_id,
                is_in(opts.participation_event_id),
            ),
            SignalID.EVENT_ID.field: validate_on_opt_set(
                signals.get(SignalID.EVENT_ID),
                opts.event_id,
                is_in(opts.event_id),
            ),
        }
        return errors_only(outcomes)

    def _validate_passport_signals(self, signals: SignalGetter, opts: VerifyOptions) -> Dict[str, Exception]:
        root_outcome = _verify_root(opts.passport_root_verifier, signals.get(SignalID.ID_STATE_ROOT))

        now = self._clock()
        today = start_of_day(now)

        outcomes: Dict[str, Outcome] = {
            SignalID.ID_STATE_ROOT.field: root_outcome,
            SignalID.SELECTOR.field: validate_on_opt_set(
                signals.get(SignalID.SELECTOR),
                opts.proof_selector_value,
                is_in(opts.proof_selector_value),
            ),
            SignalID.EVENT_ID.field: validate_on_opt_set(
                signals.get(SignalID.EVENT_ID),
                opts.event_id,
                is_in(opts.event_id),
            ),
            SignalID.CITIZENSHIP.field: validate_on_opt_set(
                decode_text(signals.get(SignalID.CITIZENSHIP)),
                opts.citizenships,
                is_in(*opts.citizenships),
            ),
            SignalID.EVENT_DATA.field: validate_on_opt_set(
                signals.get(SignalID.EVENT_DATA),
                opts.event_data_rule,
                opts.event_data_rule,
            ),
            SignalID.DOCUMENT_TYPE.field: validate_on_opt_set(
                decode_text(signals.get(SignalID.DOCUMENT_TYPE)),
                opts.document_type,
                is_in(opts.document_type),
            ),
        }

        if opts.proof_type is ProofType.GEORGIAN_PASSPORT:
            outcomes[SignalID.CURRENT_DATE.field] = validate(
                signals.get(SignalID.CURRENT_DATE),
                REQUIRED,
                after_date(today - timedelta(days=1)),
                before_date(today + timedelta(days=1)),
            )
            outcomes[SignalID.PERSONAL_NUMBER_HASH.field] = validate(
                signals.get(SignalID.PERSONAL_NUMBER_HASH),
                REQUIRED,
            )

        errors = errors_only(outcomes)
        errors.update(self._validate_birth_date(signals, opts, now))
        if not opts.skip_expiration_check:
            errors.update(_validate_expiration(signals, now))
        errors.update(_validate_identities_inputs(signals, opts))
        return errors

    def _validate_birth_date(
        self,
        signals: SignalGetter,
        opts: VerifyOptions,
        now: datetime,
    ) -> Dict[str, Exception]:
        if is_unset(opts.age):
            return {}

        # upper bound is a date: the earlier it is, the higher the age
        cutoff = years_ago(now, opts.age)
        return or_error(
            validate(signals.get(SignalID.BIRTH_DATE), REQUIRED, before_date(cutoff)),
            validate(signals.get(SignalID.BIRTH_DATE_UPPER_BOUND), REQUIRED, equal_date(cutoff)),
            (SignalID.BIRTH_DATE.field, SignalID.BIRTH_DATE_UPPER_BOUND.field),
        )

    def __repr__(self) -> str:
        return f"Verifier(proof_type={self.options.proof_type.value!r})"


def new_verifier(verification_key: Optional[bytes], *options: VerifyOption) -> Verifier:
    """
    Build a verifier with the default Groth16 checker.

    Raises:
        ConfigurationError: missing or unreadable verification key
    """
    return Verifier(verification_key, *options)


# ============================================================================
# Helpers
# ============================================================================

def _validate_length(pub_signals: Sequence[str], count: int) -> Outcome:
    if not pub_signals:
        return validate(None, REQUIRED)
    if len(pub_signals) != count:
        return RuleError(f"the length must be exactly {count}")
    return None


def _verify_root(verifier: RootVerifier, root: str) -> Outcome:
    """
    Fold an invalid root into the field outcome.

    Raises:
        RootVerificationError: root could not be checked
    """
    try:
        verifier.verify_root(root)
    except InvalidRootError as e:
        return e
    return None


def _validate_expiration(signals: SignalGetter, now: datetime) -> Dict[str, Exception]:
    lower_bound = signals.get(SignalID.EXPIRATION_DATE_LOWER_BOUND)
    expiration = signals.get(SignalID.EXPIRATION_DATE)

    return errors_only({
        SignalID.EXPIRATION_DATE_LOWER_BOUND.field: (
            SKIPPED if is_empty_zk_date(lower_bound) else validate(lower_bound, equal_date(now))
        ),
        SignalID.EXPIRATION_DATE.field: (
            SKIPPED if is_empty_zk_date(expiration) else validate(expiration, after_date(now))
        ),
    })


def _validate_identities_inputs(signals: SignalGetter, opts: VerifyOptions) -> Dict[str, Exception]:
    counter_field = SignalID.IDENTITY_COUNTER_UPPER_BOUND.field
    timestamp_field = SignalID.TIMESTAMP_UPPER_BOUND.field

    counter_outcome: Outcome = SKIPPED
    timestamp_outcome: Outcome = SKIPPED

    if not is_unset(opts.max_identities_count):
        raw = signals.get(SignalID.IDENTITY_COUNTER_UPPER_BOUND)
        counter = parse_decimal(raw)
        if counter is None:
            counter_outcome = RuleError(f"invalid integer: {raw!r}")
        else:
            counter_outcome = validate(counter, MaxRule(opts.max_identities_count))

    if opts.max_identity_creation_timestamp is not None:
        # the circuit emits a plain unix timestamp, not a packed date
        raw = signals.get(SignalID.TIMESTAMP_UPPER_BOUND)
        timestamp = parse_decimal(raw)
        try:
            moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (TypeError, OverflowError, OSError, ValueError):
            timestamp_outcome = RuleError(f"invalid timestamp: {raw!r}")
        else:
            timestamp_outcome = validate(moment, MaxRule(opts.max_identity_creation_timestamp))

    return or_error(counter_outcome, timestamp_outcome, (counter_field, timestamp_field))
