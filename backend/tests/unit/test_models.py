"""
数据模型单元测试

每个模块完成后必须运行：pytest tests/unit/test_models.py -v
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from signdesk.models import (
    AppliedSignature,
    Document,
    DocumentCreate,
    DocumentStatus,
    PlacementRequest,
    Position,
    SignatureProfile,
    UserCreate,
)


class TestPosition:
    """位置模型测试"""

    def test_extra_fields_pass_through(self):
        """测试附加布局字段原样保留"""
        pos = Position.model_validate({"gridPosition": "B2", "x": 120.5, "y": 40, "size": "md"})
        assert pos.grid_position == "B2"
        assert pos.extras == {"x": 120.5, "y": 40, "size": "md"}
        assert pos.to_wire() == {"gridPosition": "B2", "x": 120.5, "y": 40, "size": "md"}

    def test_snake_case_name_accepted(self):
        """测试Python侧字段名"""
        assert Position(grid_position="C3").grid_position == "C3"

    def test_grid_position_stripped(self):
        """测试gridPosition去除首尾空白"""
        pos = Position.model_validate({"gridPosition": "  D4 "})
        assert pos.to_wire() == {"gridPosition": "D4"}

    @pytest.mark.parametrize("payload", [
        {},
        {"gridPosition": ""},
        {"gridPosition": "   "},
        {"gridPosition": 7},
        {"gridPosition": None},
    ])
    def test_invalid_grid_position(self, payload):
        """测试gridPosition缺失/为空/非字符串"""
        with pytest.raises(PydanticValidationError):
            Position.model_validate(payload)


class TestPlacementRequest:
    """落位请求模型测试"""

    def test_wire_payload(self):
        """测试线上格式解析"""
        req = PlacementRequest.model_validate({
            "documentId": " doc-1 ",
            "signatureId": "sig-1",
            "pageNumber": 2,
            "position": {"gridPosition": "A1"},
        })
        assert req.document_id == "doc-1"
        assert req.key == ("doc-1", 2, "sig-1")

    @pytest.mark.parametrize("page", [0, -1, "2", 1.5])
    def test_invalid_page_number(self, page):
        """测试页码必须为>=1的整数"""
        with pytest.raises(PydanticValidationError):
            PlacementRequest.model_validate({
                "documentId": "doc-1",
                "signatureId": "sig-1",
                "pageNumber": page,
                "position": {"gridPosition": "A1"},
            })

    def test_blank_identifier(self):
        """测试空白ID"""
        with pytest.raises(PydanticValidationError):
            PlacementRequest(
                document_id="  ",
                signature_id="sig-1",
                page_number=1,
                position=Position(grid_position="A1"),
            )


class TestAppliedSignature:
    """落位记录模型测试"""

    def test_wire_shape(self):
        """测试线上格式字段"""
        applied = AppliedSignature(
            id="a-1",
            document_id="doc-1",
            signature_id="sig-1",
            page_number=1,
            position=Position(grid_position="A1", x=10),
        )
        wire = applied.to_wire()
        assert set(wire) == {"id", "documentId", "signatureId", "pageNumber", "position", "appliedAt"}
        assert wire["position"] == {"gridPosition": "A1", "x": 10}

    def test_frozen(self):
        """测试落位记录不可直接修改"""
        applied = AppliedSignature(
            id="a-1",
            document_id="doc-1",
            signature_id="sig-1",
            page_number=1,
            position=Position(grid_position="A1"),
        )
        with pytest.raises(PydanticValidationError):
            applied.page_number = 2


class TestDocument:
    """文档模型测试"""

    def test_default_status(self):
        """测试默认状态为pending"""
        data = DocumentCreate(
            user_id="u-1", file_name="a.pdf", original_name="a.pdf", file_path="uploads/a.pdf"
        )
        assert data.status == DocumentStatus.PENDING

    def test_page_size_list(self, document: Document):
        """测试逐页尺寸解析"""
        sizes = document.page_size_list()
        assert len(sizes) == 3
        assert (sizes[2].width, sizes[2].height) == (842, 595)

    def test_page_size_list_empty(self, other_document: Document):
        """测试未设置逐页尺寸"""
        assert other_document.page_size_list() == []

    @pytest.mark.parametrize("page_sizes", [
        "not json",
        '{"width": 612, "height": 792}',
        '[{"width": 612}]',
        '[{"width": "wide", "height": 792}]',
    ])
    def test_invalid_page_sizes(self, page_sizes):
        """测试逐页尺寸不是合法JSON列表时登记即失败"""
        with pytest.raises(PydanticValidationError):
            DocumentCreate(
                user_id="u-1", file_name="a.pdf", original_name="a.pdf",
                file_path="uploads/a.pdf", page_sizes=page_sizes,
            )

    def test_blank_page_sizes_unset(self):
        """测试空串视为未设置"""
        data = DocumentCreate(
            user_id="u-1", file_name="a.pdf", original_name="a.pdf",
            file_path="uploads/a.pdf", page_sizes="",
        )
        assert data.page_sizes is None


class TestUserAndSignature:
    """用户/签章配置模型测试"""

    def test_email_normalized(self):
        """测试邮箱转小写"""
        data = UserCreate(email=" Bob@Example.COM ", password="x", full_name="Bob")
        assert data.email == "bob@example.com"

    def test_invalid_email(self):
        """测试非法邮箱"""
        with pytest.raises(PydanticValidationError):
            UserCreate(email="not-an-email", password="x", full_name="Bob")

    def test_secrets_hidden_from_repr(self, signature: SignatureProfile):
        """测试私钥与密码不出现在repr中"""
        text = repr(signature)
        assert "PRIVATE KEY" not in text
        assert "p12-password" not in text
        assert signature.password == "p12-password"
