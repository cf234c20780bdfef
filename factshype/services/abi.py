"""Read-only fragment of the Facts contract ABI."""


def _view(name, inputs, outputs):
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": "view",
    }


def _arg(name, type_, **extra):
    return {"name": name, "type": type_, "internalType": type_, **extra}


_QUESTION_ID = [_arg("questionId", "uint256")]

_SYSTEM_CONFIG = _arg("systemConfig", "tuple", components=[
    _arg("minStakeOfNativeBountyToHuntBP", "uint128"),
    _arg("minStakeToSettleAsDAO", "uint128"),
    _arg("minVouched", "uint128"),
    _arg("challengeFee", "uint128"),
    _arg("huntPeriod", "uint64"),
    _arg("challengePeriod", "uint64"),
    _arg("settlePeriod", "uint64"),
    _arg("reviewPeriod", "uint64"),
])

_DISTRIBUTION_CONFIG = _arg("distributionConfig", "tuple", components=[
    _arg("hunterBP", "uint128"),
    _arg("voucherBP", "uint128"),
])

_CHALLENGE_CONFIG = _arg("challengeConfig", "tuple", components=[
    _arg("slashHunterBP", "uint64"),
    _arg("slashVoucherBP", "uint64"),
    _arg("slashDaoBP", "uint64"),
    _arg("daoOpFeeBP", "uint64"),
])

_SLOT_DATA = _arg("slotData", "tuple", components=[
    _arg("startHuntAt", "uint96"),
    _arg("endHuntAt", "uint96"),
    _arg("answerId", "uint16"),
    _arg("overthrownAnswerId", "uint16"),
    _arg("challenged", "bool"),
    _arg("challengeSucceeded", "bool"),
    _arg("overridden", "bool"),
    _arg("finalized", "bool"),
])

_ANSWER = [
    _arg("hunter", "address"),
    _arg("encodedAnswer", "bytes"),
    _arg("byChallenger", "bool"),
    _arg("totalVouched", "uint248"),
]

FACTS_ABI = [
    _view("config", [], [_SYSTEM_CONFIG, _DISTRIBUTION_CONFIG, _CHALLENGE_CONFIG]),
    _view("questions", [_arg("", "uint256")], [
        _arg("questionType", "uint8"),
        _arg("seeker", "address"),
        _arg("description", "string"),
        _arg("bountyToken", "address"),
        _arg("bountyAmount", "uint96"),
        _SLOT_DATA,
    ]),
    _view("getAnswers", _QUESTION_ID, [_arg("", "tuple[]", components=_ANSWER)]),
    _view("getMostVouchedAnsId", _QUESTION_ID, [_arg("winnerAnsId", "uint16")]),
    _view("getNumOfQuestions", [], [_arg("", "uint256")]),
    _view("isDAO", [_arg("user", "address")], [_arg("", "bool")]),
    _view("getUserEngagingQIds", [_arg("user", "address")], [_arg("", "uint256[]")]),
    _view("owner", [], [_arg("", "address")]),
    _view("COUNCIL", [], [_arg("", "address")]),
]
