"""
IPC classification helpers for KIPRIS Insight.
Maps raw KIPRIS `ipcNumber` strings to their main subclass and Korean name.
"""

import re
from typing import Optional, Tuple

UNKNOWN_IPC_NAME = "Unknown"
MAIN_CODE_LENGTH = 4

_WHITESPACE = re.compile(r"\s+")

# IPC subclass -> Korean title (WIPO IPC, KIPO Korean edition, abbreviated)
IPC_KOREAN_NAMES = {
    # === A: 생활필수품 ===
    "A01B": "농업 또는 임업에서의 토양 가공",
    "A01N": "인체, 동물 또는 식물의 보존; 살생물제",
    "A23L": "식품, 식료품 또는 비알콜성 음료",
    "A47J": "주방용 기구; 커피 및 향신료 분쇄기",
    "A47L": "가정용 세척 또는 청소",
    "A61B": "진단; 수술; 개인 식별",
    "A61F": "혈관 필터; 보철; 붕대",
    "A61H": "물리 치료 장치",
    "A61K": "의약용, 치과용 또는 화장용 제제",
    "A61M": "인체에 매체를 주입하는 장치",
    "A61N": "전기 치료; 자기 치료; 방사선 치료",
    "A61P": "화합물 또는 의약 제제의 치료 활성",
    "A63F": "카드, 보드 또는 룰렛 게임; 비디오 게임",
    # === B: 처리조작; 운수 ===
    "B01D": "분리",
    "B01J": "화학적 또는 물리적 방법; 촉매",
    "B05D": "유동체를 표면에 적용하는 방법",
    "B08B": "청소 일반",
    "B23K": "납땜; 용접; 레이저 빔 가공",
    "B25J": "매니퓰레이터; 로봇",
    "B29C": "플라스틱의 성형 또는 접합",
    "B32B": "적층체",
    "B60K": "차량의 동력 장치 또는 전동 장치의 배치",
    "B60L": "전기 추진 차량의 추진",
    "B60R": "차량의 부속 장치",
    "B60W": "차량 서브유닛의 협조 제어",
    "B62D": "자동차; 트레일러",
    "B65D": "물품 또는 재료의 보관 또는 수송용 용기",
    "B65G": "운반 또는 저장 장치",
    "B82Y": "나노구조의 특정 용도 또는 응용",
    # === C: 화학; 야금 ===
    "C01B": "비금속 원소; 그 화합물",
    "C07D": "복소환식 화합물",
    "C07K": "펩티드",
    "C08F": "탄소-탄소 불포화 결합 반응에 의한 고분자 화합물",
    "C08G": "탄소-탄소 불포화 결합 반응 이외에 의한 고분자 화합물",
    "C08J": "고분자 물질의 가공; 후처리",
    "C08K": "무기 또는 비고분자 유기 물질의 배합 성분으로서의 사용",
    "C08L": "고분자 화합물의 조성물",
    "C09D": "코팅 조성물; 잉크",
    "C09J": "접착제",
    "C09K": "달리 분류되지 않는 응용 물질",
    "C12N": "미생물 또는 효소; 유전자 공학",
    "C12Q": "효소, 핵산 또는 미생물을 포함하는 측정 또는 시험 방법",
    "C22C": "합금",
    "C23C": "금속 재료의 피복; 화학적 표면 처리",
    "C25B": "전해 또는 전기 영동 방법",
    # === D: 섬유; 지류 ===
    "D01F": "인조 필라멘트의 제조",
    "D06F": "섬유 제품의 세탁, 건조, 다림질",
    # === E: 고정구조물 ===
    "E04B": "일반 건축물 구조",
    "E04F": "건축물의 마무리 공사",
    "E05B": "자물쇠; 열쇠",
    # === F: 기계공학; 조명; 가열; 무기; 폭파 ===
    "F01N": "기계 또는 기관의 배기 장치",
    "F02D": "연소 기관의 제어",
    "F02M": "연소 기관에 대한 가연성 혼합기의 공급",
    "F16H": "전동 장치",
    "F16K": "밸브; 콕",
    "F21V": "조명 장치의 기능적 특징 또는 세부",
    "F24F": "공기 조화; 공기 가습; 환기",
    "F25B": "냉동 기계, 플랜트 또는 시스템",
    "F25D": "냉장고; 냉각실",
    # === G: 물리학 ===
    "G01B": "길이, 두께 또는 유사한 직선 치수의 측정",
    "G01C": "거리, 수준 또는 방위의 측정; 측량; 항법",
    "G01N": "재료의 화학적 또는 물리적 성질 측정에 의한 분석",
    "G01R": "전기적 변수의 측정; 자기적 변수의 측정",
    "G01S": "무선 방향 탐지; 무선 항법; 레이더",
    "G02B": "광학 요소, 광학 시스템 또는 광학 장치",
    "G02F": "광의 강도, 색, 위상, 편광 또는 방향 제어 장치",
    "G03F": "사진 제판; 포토레지스트",
    "G05B": "제어 또는 조정 시스템 일반",
    "G05D": "비전기적 변수의 제어 또는 조정 시스템",
    "G06F": "전기에 의한 디지털 데이터 처리",
    "G06K": "데이터의 인식; 데이터의 표시; 기록 매체",
    "G06N": "특정 계산 모델 방식의 컴퓨터 시스템",
    "G06Q": "관리용, 상업용, 금융용 데이터 처리 시스템 또는 방법",
    "G06T": "이미지 데이터 처리 또는 발생 일반",
    "G06V": "이미지 또는 비디오 인식 또는 이해",
    "G08G": "교통 제어 시스템",
    "G09G": "가변 정보를 표시하는 지시 장치의 제어 장치 또는 회로",
    "G10L": "음성 분석 또는 합성; 음성 인식",
    "G11C": "정적 기억 장치",
    "G16H": "헬스케어 정보학",
    # === H: 전기 ===
    "H01F": "자석; 인덕턴스; 변성기",
    "H01G": "콘덴서; 전해형 콘덴서",
    "H01L": "반도체 장치; 다른 곳에 속하지 않는 전기적 고체 장치",
    "H01M": "화학적 에너지를 전기적 에너지로 직접 변환하기 위한 방법 또는 수단",
    "H01Q": "안테나",
    "H02J": "전력 급전 또는 전력 배전을 위한 회로 장치; 전기 에너지 축적 시스템",
    "H02K": "발전기; 전동기",
    "H02M": "교류-교류, 교류-직류 또는 직류-직류 변환 장치",
    "H03K": "펄스 기술",
    "H04B": "전송",
    "H04L": "디지털 정보의 전송",
    "H04M": "전화 통신",
    "H04N": "화상 통신",
    "H04R": "스피커, 마이크로폰, 축음기 픽업 또는 유사한 음향 전기 기계 변환기",
    "H04W": "무선 통신 네트워크",
    "H05B": "전기 가열; 달리 분류되지 않는 전기 조명",
    "H05K": "인쇄 회로; 전기 장치의 상체 또는 구조적 세부",
    "H10K": "유기 전기 고체 장치",
}


def main_code(classification_codes: Optional[str]) -> Optional[str]:
    """
    Extract the main IPC subclass from a KIPRIS `ipcNumber` value.

    The first pipe-delimited token is the primary classification. All
    whitespace is removed and the leading four characters are upper-cased,
    so `"G06F 17/30|H04L 29/06"` yields `"G06F"`.

    Args:
        classification_codes: Raw pipe-delimited classification string.

    Returns:
        Four-character (or shorter) main code, or None if nothing usable.
    """
    if not classification_codes:
        return None
    first = classification_codes.split("|")[0].strip()
    code = _WHITESPACE.sub("", first)[:MAIN_CODE_LENGTH].upper()
    return code or None


def korean_name(code: Optional[str]) -> str:
    """Look up the Korean subclass title, or the `Unknown` sentinel."""
    if not code:
        return UNKNOWN_IPC_NAME
    return IPC_KOREAN_NAMES.get(code.upper(), UNKNOWN_IPC_NAME)


def resolve(classification_codes: Optional[str]) -> Tuple[Optional[str], str]:
    """Return `(main_code, korean_name)` for a raw classification string."""
    code = main_code(classification_codes)
    return code, korean_name(code)
