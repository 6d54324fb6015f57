"""
Function and event signatures of the contracts the pipelines talk to.

Only the entries the pipelines call are listed; selectors and topics are
derived from these canonical signatures.
"""

# Reality.eth v3 oracle (home chain)
ASK_QUESTION_SIGNATURE = "askQuestion(uint256,string,address,uint32,uint32,uint256)"
ASK_QUESTION_TYPES = ["uint256", "string", "address", "uint32", "uint32", "uint256"]

LOG_NEW_QUESTION_SIGNATURE = (
    "LogNewQuestion(bytes32,address,uint256,string,bytes32,address,uint32,uint32,uint256,uint256)"
)

# Arbitrator proxy (foreign chain)
GET_DISPUTE_FEE_SIGNATURE = "getDisputeFee(bytes32)"
GET_DISPUTE_FEE_TYPES = ["bytes32"]

REQUEST_ARBITRATION_SIGNATURE = "requestArbitration(bytes32,uint256)"
REQUEST_ARBITRATION_TYPES = ["bytes32", "uint256"]

ARBITRATION_REQUESTED_SIGNATURE = "ArbitrationRequested(bytes32,address,uint256)"
