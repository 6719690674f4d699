from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


class Database:
    """
    엔진과 세션 팩토리를 소유하는 객체입니다.
    프로세스 시작 시 한 번 생성하여 주입하고, 종료 시 dispose()로 커넥션 풀을 해제합니다.
    """

    def __init__(self, url: str):
        connect_args = {}
        engine_kwargs = {}
        if url.startswith("sqlite"):
            # SQLite에서만 필요합니다. (요청마다 다른 스레드에서 세션을 사용)
            connect_args = {"check_same_thread": False, "timeout": 30}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # 인메모리 DB는 커넥션이 하나뿐이어야 테이블이 유지됩니다.
                engine_kwargs["poolclass"] = StaticPool

        self.url = url
        self.engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        # autocommit=False, autoflush=False: 명시적으로 commit을 호출해야 DB에 반영됩니다.
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        # 모델 모듈을 임포트해야 Base.metadata에 테이블이 등록됩니다.
        from eightspots.database import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()
