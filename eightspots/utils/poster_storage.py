# eightspots/utils/poster_storage.py
import os
import time
import logging

logger = logging.getLogger(__name__)


class PosterStorage:
    """
    업로드된 포스터 이미지를 디렉터리에 저장하고, 저장된 경로(불투명 참조)를 돌려줍니다.
    파일 내용은 검증하지 않습니다.
    """

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def save(self, filename: str, data: bytes) -> str:
        """
        포스터를 '<epoch 밀리초><원본 확장자>' 이름으로 저장합니다.

        Args:
            filename: 업로드된 원본 파일명. 확장자만 사용합니다.
            data: 이미지 바이너리.

        Returns:
            저장된 파일의 경로.
        """
        ext = os.path.splitext(os.path.basename(filename or ""))[1]
        stem = str(int(time.time() * 1000))
        target_filepath = os.path.join(self.base_dir, f"{stem}{ext}")

        # 같은 밀리초에 업로드가 겹치면 접미사를 붙입니다.
        suffix = 1
        while os.path.exists(target_filepath):
            target_filepath = os.path.join(self.base_dir, f"{stem}-{suffix}{ext}")
            suffix += 1

        with open(target_filepath, "wb") as f:
            f.write(data)
        logger.info("Poster saved: %s (%d bytes)", target_filepath, len(data))
        return target_filepath

    def delete(self, poster_url: str) -> bool:
        """영화 저장에 실패했을 때 방금 저장한 포스터를 정리합니다."""
        if not poster_url or not os.path.exists(poster_url):
            return True
        os.remove(poster_url)
        return True


def public_poster_path(poster_url: str) -> str:
    """저장 경로를 정적 파일 URL로 변환합니다."""
    if not poster_url:
        return ""
    return f"/uploads/posters/{os.path.basename(poster_url)}"
