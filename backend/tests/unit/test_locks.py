"""
按键加锁单元测试

每个模块完成后必须运行：pytest tests/unit/test_locks.py -v
"""

import threading

from signdesk.storage import KeyedLocks


class TestKeyedLocks:
    """锁注册表测试"""

    def test_discard_idle(self):
        """测试空闲锁立即释放，未知键为空操作"""
        locks = KeyedLocks()
        with locks.hold("doc-1"):
            pass
        assert len(locks) == 1

        locks.discard("doc-1")
        locks.discard("unknown")
        assert len(locks) == 0

    def test_reentrant(self):
        """测试同一线程可重复进入"""
        locks = KeyedLocks()
        with locks.hold("doc-1"):
            with locks.hold("doc-1"):
                assert len(locks) == 1

    def test_discard_while_waiting_keeps_single_lock(self):
        """测试仍有线程持有/等待时 discard 延迟，同一键不会出现第二把锁"""
        locks = KeyedLocks()
        entered = threading.Event()
        release = threading.Event()
        second_entered = threading.Event()

        def holder():
            with locks.hold("doc-1"):
                entered.set()
                release.wait(timeout=5)

        def waiter():
            with locks.hold("doc-1"):
                second_entered.set()

        first = threading.Thread(target=holder)
        first.start()
        assert entered.wait(timeout=5)

        locks.discard("doc-1")
        assert len(locks) == 1

        second = threading.Thread(target=waiter)
        second.start()
        assert not second_entered.wait(timeout=0.2)

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert second_entered.is_set()
        assert len(locks) == 0
